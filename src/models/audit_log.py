"""Audit log model for tracking act lifecycle events."""

import uuid
from typing import Any

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for tracking changes to acts.

    Records who (actor_org_id / actor_user_id) did what (action) to which
    entity (entity_type, entity_id) plus an optional snapshot of changes.
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(32))
    """Entity type being audited: "act"."""

    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(32))
    """Action performed: "create", "approve", "reject"."""

    actor_org_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    actor_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    """Optional JSON snapshot: {"status": "APPROVED"}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor_user_id={self.actor_user_id})>"
        )


__all__ = ["AuditLog"]
