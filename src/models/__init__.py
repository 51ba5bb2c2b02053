"""SQLAlchemy base model with common fields and model exports."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with UUID primary key and timestamp fields."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from src.models.organization import Organization, OrganizationType  # noqa: E402
from src.models.polygon import Polygon  # noqa: E402
from src.models.contract import Contract, ContractType, contract_polygons  # noqa: E402
from src.models.trip import Trip  # noqa: E402
from src.models.act import Act, ActStatus, ActTrip  # noqa: E402
from src.models.audit_log import AuditLog  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "Organization",
    "OrganizationType",
    "Polygon",
    "Contract",
    "ContractType",
    "contract_polygons",
    "Trip",
    "Act",
    "ActStatus",
    "ActTrip",
    "AuditLog",
]
