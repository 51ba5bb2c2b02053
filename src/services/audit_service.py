"""Audit trail of act lifecycle events."""

import uuid

from sqlalchemy.orm import Session

from src.models import Act
from src.models.audit_log import AuditLog

ACT_ENTITY = "act"


class AuditService:
    """Writes audit log rows.

    Rows are only added to the session; the caller commits them in the same
    transaction as the change they describe, so a rolled back act leaves no
    audit trace.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: uuid.UUID,
        action: str,
        actor_org_id: uuid.UUID | None = None,
        actor_user_id: uuid.UUID | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Add an audit log row to the session.

        Args:
            db: Database session
            entity_type: Kind of entity, e.g. "act"
            entity_id: Primary key of the entity
            action: "create", "approved", "rejected"
            actor_org_id: Caller organization (optional)
            actor_user_id: Caller user (optional)
            changes: JSON snapshot of the changed fields (optional)

        Returns:
            The pending AuditLog row
        """
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_org_id=actor_org_id,
            actor_user_id=actor_user_id,
            changes=changes,
        )
        db.add(entry)
        return entry

    @classmethod
    def log_act(
        cls,
        db: Session,
        act: Act,
        action: str,
        actor_org_id: uuid.UUID | None,
        actor_user_id: uuid.UUID | None,
        **changes,
    ) -> AuditLog:
        """Audit an act event; the act status is always part of the snapshot."""
        snapshot = {"status": act.status.value, **changes}
        return cls.log(db, ACT_ENTITY, act.id, action, actor_org_id, actor_user_id, snapshot)


__all__ = ["AuditService", "ACT_ENTITY"]
