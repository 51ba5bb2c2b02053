"""Act ORM model (billing certificate) and the act-to-trip claim relation."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class ActStatus(str, Enum):
    """Lifecycle status of an act."""

    GENERATED = "GENERATED"
    """Issued for a contract that needs no counter-party approval (terminal)"""

    PENDING_APPROVAL = "PENDING_APPROVAL"
    """Waiting for the landfill organization to approve or reject"""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Act(Base, BaseModel):
    """
    Work-completion certificate covering one contract and one period.

    Financial figures are written once at generation time. Afterwards only
    status, rejection_reason and the approved_by_* fields change.
    """

    __tablename__ = "acts"

    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("contracts.id"),
        nullable=False,
        index=True,
    )
    contractor_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    landfill_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Landfill organization expected to approve the act",
    )
    act_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    act_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False, comment="Inclusive")

    total_volume_m3: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    price_per_m3: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    amount_wo_vat: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    vat_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    amount_with_vat: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    status: Mapped[ActStatus] = mapped_column(
        SQLEnum(ActStatus, native_enum=False),
        nullable=False,
        default=ActStatus.GENERATED,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by_org_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    approved_by_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by_org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    trips: Mapped[list["ActTrip"]] = relationship(
        "ActTrip",
        back_populates="act",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_act_landfill_status", "landfill_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Act(id={self.id}, act_number={self.act_number}, status={self.status}, "
            f"amount_with_vat={self.amount_with_vat})>"
        )


class ActTrip(Base):
    """Claim of a trip by an act. A trip can be claimed by at most one act."""

    __tablename__ = "act_trips"

    act_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("acts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    trip_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("trips.id"),
        primary_key=True,
    )

    act: Mapped["Act"] = relationship("Act", back_populates="trips")

    __table_args__ = (UniqueConstraint("trip_id", name="uq_act_trips_trip_id"),)

    def __repr__(self) -> str:
        return f"<ActTrip(act_id={self.act_id}, trip_id={self.trip_id})>"


__all__ = ["Act", "ActStatus", "ActTrip"]
