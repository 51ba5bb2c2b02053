"""Value types shared by the acts engines (never persisted)."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NamedTuple

from src.models import Act, ContractType, Organization, Polygon
from src.services.errors import InvalidInputError


@dataclass(frozen=True)
class ContractorService:
    """Contract billed by trips linked to the contract itself."""

    contractor_id: uuid.UUID


@dataclass(frozen=True)
class LandfillService:
    """Contract billed by trips unloaded at the contract's polygons."""

    landfill_id: uuid.UUID


ContractTerms = ContractorService | LandfillService


@dataclass
class OrganizationInfo:
    """Resolved organization details used on documents and reports."""

    id: uuid.UUID | None
    name: str = ""
    type: str = ""
    bin: str = ""
    head_full_name: str = ""
    address: str = ""
    phone: str = ""

    @classmethod
    def from_organization(cls, org: Organization | None) -> "OrganizationInfo":
        if org is None:
            return cls(id=None)
        return cls(
            id=org.id,
            name=org.name or "",
            type=org.type.value if org.type else "",
            bin=org.bin or "",
            head_full_name=org.head_full_name or "",
            address=org.address or "",
            phone=org.phone or "",
        )

    @classmethod
    def from_polygon(cls, polygon: Polygon) -> "OrganizationInfo":
        return cls(id=polygon.id, name=polygon.name or "", type="POLYGON")


@dataclass
class ContractInfo:
    """Contract as seen by the generation engine.

    ``terms`` replaces the nullable contractor/landfill pair of the row, so a
    contract is always exactly one of the two billing models.
    """

    id: uuid.UUID
    name: str
    terms: ContractTerms
    customer: OrganizationInfo
    counterparty: OrganizationInfo
    price_per_m3: Decimal
    budget_total: Decimal
    start_date: date
    end_date: date

    @property
    def contract_type(self) -> ContractType:
        if isinstance(self.terms, LandfillService):
            return ContractType.LANDFILL_SERVICE
        return ContractType.CONTRACTOR_SERVICE

    @property
    def requires_approval(self) -> bool:
        return isinstance(self.terms, LandfillService)

    @property
    def contractor_id(self) -> uuid.UUID | None:
        return self.terms.contractor_id if isinstance(self.terms, ContractorService) else None

    @property
    def landfill_id(self) -> uuid.UUID | None:
        return self.terms.landfill_id if isinstance(self.terms, LandfillService) else None


class TripForAct(NamedTuple):
    """Unclaimed trip eligible for billing."""

    id: uuid.UUID
    volume_m3: Decimal
    entry_at: datetime


@dataclass
class ActDocument:
    """Everything the act renderer needs."""

    act: Act
    contract: ContractInfo
    work_description: str
    paid_before: Decimal
    budget_exceeded: bool


@dataclass
class GeneratedAct:
    file_name: str
    content: bytes
    act: Act


class ReportMode(str, Enum):
    """Which side of the trip the report is built for."""

    CONTRACTOR = "CONTRACTOR"
    """Target is a contractor; groups are polygons"""

    LANDFILL = "LANDFILL"
    """Target is a polygon; groups are contractors"""

    @classmethod
    def parse(cls, raw: "str | ReportMode | None") -> "ReportMode":
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().upper())
        except ValueError:
            raise InvalidInputError(f"invalid report mode: {raw!r}") from None

    @property
    def group_label(self) -> str:
        return "Landfill" if self is ReportMode.CONTRACTOR else "Contractor"

    @property
    def target_label(self) -> str:
        return "Contractor" if self is ReportMode.CONTRACTOR else "Landfill"


class ReportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


@dataclass
class TripDetail:
    """One trip row of a report group."""

    id: uuid.UUID
    entry_at: datetime
    exit_at: datetime | None = None
    status: str = ""
    polygon_id: uuid.UUID | None = None
    polygon_name: str | None = None
    contractor_id: uuid.UUID | None = None
    contractor_name: str | None = None
    vehicle_plate_number: str | None = None
    detected_plate_number: str | None = None
    detected_volume_entry: Decimal | None = None
    detected_volume_exit: Decimal | None = None
    total_volume_m3: Decimal | None = None

    @property
    def volume(self) -> Decimal | None:
        """Best known volume: total, else entry, else exit."""
        for value in (self.total_volume_m3, self.detected_volume_entry, self.detected_volume_exit):
            if value is not None:
                return value
        return None


@dataclass
class TripGroup:
    """A counterpart of the report target with its trip count and rows."""

    id: uuid.UUID | None
    name: str | None
    trip_count: int = 0
    trips: list[TripDetail] = field(default_factory=list)

    @property
    def total_volume(self) -> Decimal:
        return sum((t.volume for t in self.trips if t.volume is not None), Decimal("0"))


@dataclass
class ActReport:
    mode: ReportMode
    target: OrganizationInfo
    period_start: date
    period_end: date
    total_trips: int
    groups: list[TripGroup]

    @property
    def total_volume(self) -> Decimal:
        return sum((g.total_volume for g in self.groups), Decimal("0"))


@dataclass
class GeneratedReport:
    file_name: str
    content: bytes
    media_type: str
    report: ActReport


__all__ = [
    "ContractorService",
    "LandfillService",
    "ContractTerms",
    "OrganizationInfo",
    "ContractInfo",
    "TripForAct",
    "ActDocument",
    "GeneratedAct",
    "ReportMode",
    "ReportFormat",
    "TripDetail",
    "TripGroup",
    "ActReport",
    "GeneratedReport",
]
