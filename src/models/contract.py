"""Contract ORM model and its polygon association table."""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Column, Date, ForeignKey, Numeric, String, Table
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class ContractType(str, Enum):
    """Billing model of a contract."""

    CONTRACTOR_SERVICE = "CONTRACTOR_SERVICE"
    """Trips are linked to the contract directly"""

    LANDFILL_SERVICE = "LANDFILL_SERVICE"
    """Trips are selected through the contract's polygons; acts need approval"""


contract_polygons = Table(
    "contract_polygons",
    Base.metadata,
    Column("contract_id", ForeignKey("contracts.id", ondelete="CASCADE"), primary_key=True),
    Column("polygon_id", ForeignKey("polygons.id"), primary_key=True),
)


class Contract(Base, BaseModel):
    """Billing agreement between a customer and a contractor or landfill.

    Exactly one of contractor_id / landfill_id is meaningful depending on
    contract_type. The service layer never reads these fields directly and
    works with ContractInfo.terms instead.
    """

    __tablename__ = "contracts"

    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Contract name")
    contract_type: Mapped[ContractType] = mapped_column(
        SQLEnum(ContractType, native_enum=False),
        nullable=False,
        default=ContractType.CONTRACTOR_SERVICE,
        comment="CONTRACTOR_SERVICE or LANDFILL_SERVICE",
    )
    contractor_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Contractor (CONTRACTOR_SERVICE only)",
    )
    landfill_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Landfill organization (LANDFILL_SERVICE only)",
    )
    customer_org_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        comment="Customer organization that created the contract",
    )
    price_per_m3: Mapped[Decimal] = mapped_column(
        Numeric(18, 4),
        nullable=False,
        comment="Price per cubic meter of removed snow",
    )
    budget_total: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Budget ceiling; 0 means unlimited",
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Validity start")
    end_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Validity end (inclusive)")

    contractor: Mapped["Organization | None"] = relationship(  # noqa: F821
        "Organization",
        foreign_keys=[contractor_id],
    )
    landfill: Mapped["Organization | None"] = relationship(  # noqa: F821
        "Organization",
        foreign_keys=[landfill_id],
    )
    customer: Mapped["Organization"] = relationship(  # noqa: F821
        "Organization",
        foreign_keys=[customer_org_id],
    )
    polygons: Mapped[list["Polygon"]] = relationship(  # noqa: F821
        "Polygon",
        secondary=contract_polygons,
    )

    def __repr__(self) -> str:
        return (
            f"<Contract(id={self.id}, name={self.name}, type={self.contract_type}, "
            f"start_date={self.start_date}, end_date={self.end_date})>"
        )


__all__ = ["Contract", "ContractType", "contract_polygons"]
