"""Organization ORM model for contractors, landfills and customers."""

from enum import Enum

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class OrganizationType(str, Enum):
    """Kinds of parties known to the acts service."""

    AKIMAT = "AKIMAT"
    """City administration (customer)"""

    KGU = "KGU"
    """Municipal state institution (customer)"""

    TOO = "TOO"
    """Limited liability partnership acting as customer"""

    CONTRACTOR = "CONTRACTOR"
    """Snow-removal contractor"""

    LANDFILL = "LANDFILL"
    """Owner of snow disposal polygons"""


class Organization(Base, BaseModel):
    """A party referenced by contracts, acts and reports.

    Read-only from the acts service point of view: rows are owned by the
    organizations registry and only looked up here.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Display name",
    )
    type: Mapped[OrganizationType] = mapped_column(
        SQLEnum(OrganizationType, native_enum=False),
        nullable=False,
        index=True,
        comment="Organization type: AKIMAT/KGU/TOO/CONTRACTOR/LANDFILL",
    )
    bin: Mapped[str | None] = mapped_column(
        String(12),
        nullable=True,
        comment="Business identification number (tax id)",
    )
    head_full_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Full name of the head of organization",
    )
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name}, type={self.type})>"


__all__ = ["Organization", "OrganizationType"]
