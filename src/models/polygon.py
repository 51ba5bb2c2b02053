"""Polygon ORM model (snow disposal site)."""

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Polygon(Base, BaseModel):
    """Snow disposal site where trucks unload removed snow."""

    __tablename__ = "polygons"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Polygon display name",
    )
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Landfill organization operating this polygon",
    )

    organization: Mapped["Organization | None"] = relationship(  # noqa: F821
        "Organization",
        foreign_keys=[organization_id],
    )

    def __repr__(self) -> str:
        return f"<Polygon(id={self.id}, name={self.name})>"


__all__ = ["Polygon"]
