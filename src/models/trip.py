"""Trip ORM model (upstream trip ledger, read-only here)."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Trip(Base, BaseModel):
    """A single truck trip to a polygon, produced by trip detection.

    Contractor-service billing uses contract_id; landfill-service billing
    uses polygon_id. Claims by acts live in act_trips, never on this row.
    """

    __tablename__ = "trips"

    contract_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("contracts.id"),
        nullable=True,
        index=True,
        comment="Contract the trip was performed under (via ticket)",
    )
    contractor_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    polygon_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("polygons.id"),
        nullable=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="OK",
        comment="Trip verdict from detection (OK, MISMATCH, ...)",
    )
    entry_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    exit_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    vehicle_plate_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    detected_plate_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    detected_volume_entry: Mapped[Decimal | None] = mapped_column(
        Numeric(18, 3),
        nullable=True,
        comment="Body volume detected on entry (m3)",
    )
    detected_volume_exit: Mapped[Decimal | None] = mapped_column(
        Numeric(18, 3),
        nullable=True,
        comment="Body volume detected on exit (m3)",
    )
    total_volume_m3: Mapped[Decimal | None] = mapped_column(Numeric(18, 3), nullable=True)

    polygon: Mapped["Polygon | None"] = relationship(  # noqa: F821
        "Polygon",
        foreign_keys=[polygon_id],
    )
    contractor: Mapped["Organization | None"] = relationship(  # noqa: F821
        "Organization",
        foreign_keys=[contractor_id],
    )

    __table_args__ = (
        Index("idx_trip_contract_entry", "contract_id", "entry_at"),
        Index("idx_trip_polygon_entry", "polygon_id", "entry_at"),
        Index("idx_trip_contractor_entry", "contractor_id", "entry_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Trip(id={self.id}, status={self.status}, entry_at={self.entry_at}, "
            f"polygon_id={self.polygon_id})>"
        )


__all__ = ["Trip"]
