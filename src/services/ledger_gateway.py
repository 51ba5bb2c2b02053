"""Ledger gateway: every query and mutation the acts engines need.

Keeps SQLAlchemy out of the business logic. One gateway wraps one session,
i.e. one unit of work.
"""

import logging
import uuid
from datetime import date, datetime, time

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models import (
    Act,
    ActStatus,
    ActTrip,
    Contract,
    ContractType,
    Organization,
    OrganizationType,
    Polygon,
    Trip,
    contract_polygons,
)
from src.services.act_utils import MONEY_PLACES, round_half_away, to_decimal
from src.services.audit_service import AuditService
from src.services.domain import (
    ContractInfo,
    ContractorService,
    LandfillService,
    OrganizationInfo,
    ReportMode,
    TripDetail,
    TripForAct,
    TripGroup,
)
from src.services.errors import ActConflictError, InvalidInputError

logger = logging.getLogger(__name__)

TEST_ORGANIZATION_PATTERN = "TEST%"


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min)


class LedgerGateway:
    """SQLAlchemy implementation of the ledger operations."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    # Contracts

    def get_contract(self, contract_id: uuid.UUID) -> ContractInfo | None:
        """Get contract with resolved customer and counterparty.

        Returns:
            ContractInfo if found, None otherwise

        Raises:
            InvalidInputError: If the row does not match its contract type
        """
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            return None

        if contract.contract_type == ContractType.LANDFILL_SERVICE:
            if contract.landfill_id is None:
                raise InvalidInputError(f"landfill contract {contract.id} has no landfill")
            terms = LandfillService(landfill_id=contract.landfill_id)
            counterparty = contract.landfill
        else:
            if contract.contractor_id is None:
                raise InvalidInputError(f"contractor contract {contract.id} has no contractor")
            terms = ContractorService(contractor_id=contract.contractor_id)
            counterparty = contract.contractor

        return ContractInfo(
            id=contract.id,
            name=contract.name,
            terms=terms,
            customer=OrganizationInfo.from_organization(contract.customer),
            counterparty=OrganizationInfo.from_organization(counterparty),
            price_per_m3=to_decimal(contract.price_per_m3),
            budget_total=to_decimal(contract.budget_total),
            start_date=contract.start_date,
            end_date=contract.end_date,
        )

    def get_contract_polygon_ids(self, contract_id: uuid.UUID) -> list[uuid.UUID]:
        stmt = (
            select(contract_polygons.c.polygon_id)
            .where(contract_polygons.c.contract_id == contract_id)
            .order_by(contract_polygons.c.polygon_id)
        )
        return list(self.db.execute(stmt).scalars().all())

    # Trips for acts

    def _unclaimed_trips(self, date_from: date, date_to_exclusive: date, statuses: list[str] | None):
        claimed = select(ActTrip.trip_id).where(ActTrip.trip_id == Trip.id).exists()
        stmt = select(Trip).where(
            Trip.entry_at >= _start_of(date_from),
            Trip.entry_at < _start_of(date_to_exclusive),
            ~claimed,
        )
        if statuses:
            stmt = stmt.where(Trip.status.in_(statuses))
        return stmt.order_by(Trip.entry_at.asc(), Trip.id.asc())

    def list_trips_for_period(
        self,
        contract_id: uuid.UUID,
        date_from: date,
        date_to_exclusive: date,
        statuses: list[str] | None = None,
    ) -> list[TripForAct]:
        """Unclaimed trips performed under the contract, oldest first.

        Volume is the detected entry volume (missing -> 0).
        """
        stmt = self._unclaimed_trips(date_from, date_to_exclusive, statuses).where(
            Trip.contract_id == contract_id
        )
        trips = self.db.execute(stmt).scalars().all()
        return [
            TripForAct(trip.id, to_decimal(trip.detected_volume_entry), trip.entry_at)
            for trip in trips
        ]

    def list_trips_for_landfill_contract(
        self,
        contract_id: uuid.UUID,
        polygon_ids: list[uuid.UUID],
        date_from: date,
        date_to_exclusive: date,
        statuses: list[str] | None = None,
    ) -> list[TripForAct]:
        """Unclaimed trips unloaded at any of the polygons, oldest first.

        Volume is entry minus exit volume (missing -> 0).
        """
        if not polygon_ids:
            return []
        stmt = self._unclaimed_trips(date_from, date_to_exclusive, statuses).where(
            Trip.polygon_id.in_(polygon_ids)
        )
        trips = self.db.execute(stmt).scalars().all()
        logger.debug(
            "Landfill contract %s: %d unclaimed trips on %d polygons",
            contract_id,
            len(trips),
            len(polygon_ids),
        )
        return [
            TripForAct(
                trip.id,
                to_decimal(trip.detected_volume_entry) - to_decimal(trip.detected_volume_exit),
                trip.entry_at,
            )
            for trip in trips
        ]

    # Acts

    def sum_acts(self, contract_id: uuid.UUID):
        """Sum of amount_wo_vat over all acts of the contract."""
        total = self.db.execute(
            select(func.coalesce(func.sum(Act.amount_wo_vat), 0)).where(Act.contract_id == contract_id)
        ).scalar()
        return round_half_away(total, MONEY_PLACES)

    def create_act(self, act: Act, trip_ids: list[uuid.UUID]) -> Act:
        """Insert the act, its trip claims and an audit entry in one transaction.

        Raises:
            ActConflictError: If the act number is taken or a trip is already
                claimed; nothing is persisted in that case
        """
        try:
            self.db.add(act)
            self.db.flush()
            self.db.add_all([ActTrip(act_id=act.id, trip_id=trip_id) for trip_id in trip_ids])
            AuditService.log_act(
                self.db,
                act,
                "create",
                act.created_by_org_id,
                act.created_by_user_id,
                act_number=act.act_number,
                trips=len(trip_ids),
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Act %s not created, constraint violation: %s", act.act_number, e.orig)
            raise ActConflictError(
                f"act {act.act_number} conflicts with an existing act or already claimed trips"
            ) from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(act)
        return act

    def get_act_by_id(self, act_id: uuid.UUID) -> Act | None:
        return self.db.get(Act, act_id)

    def update_act_status(
        self,
        act_id: uuid.UUID,
        status: ActStatus,
        rejection_reason: str | None = None,
        approved_by_org_id: uuid.UUID | None = None,
        approved_by_user_id: uuid.UUID | None = None,
        approved_at: datetime | None = None,
        *,
        actor_org_id: uuid.UUID | None = None,
        actor_user_id: uuid.UUID | None = None,
    ) -> Act | None:
        """Set status and approval fields of an act.

        Returns:
            Updated Act, or None if not found
        """
        act = self.get_act_by_id(act_id)
        if act is None:
            return None

        act.status = status
        act.rejection_reason = rejection_reason
        act.approved_by_org_id = approved_by_org_id
        act.approved_by_user_id = approved_by_user_id
        act.approved_at = approved_at

        AuditService.log_act(
            self.db,
            act,
            status.value.lower(),
            actor_org_id,
            actor_user_id,
            rejection_reason=rejection_reason,
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(act)
        return act

    def list_acts_for_landfill(self, landfill_id: uuid.UUID, status: ActStatus | None = None) -> list[Act]:
        stmt = select(Act).where(Act.landfill_id == landfill_id)
        if status is not None:
            stmt = stmt.where(Act.status == status)
        stmt = stmt.order_by(Act.act_date.desc(), Act.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    # Organizations and polygons

    def get_organization(self, org_id: uuid.UUID) -> Organization | None:
        return self.db.get(Organization, org_id)

    def get_polygon(self, polygon_id: uuid.UUID) -> Polygon | None:
        return self.db.get(Polygon, polygon_id)

    def list_polygons(self) -> list[TripGroup]:
        """All polygons as empty report groups, by name."""
        rows = self.db.execute(select(Polygon.id, Polygon.name).order_by(Polygon.name.asc())).all()
        return [TripGroup(id=row.id, name=row.name, trip_count=0) for row in rows]

    def list_contractors(self) -> list[TripGroup]:
        """All non-test contractor organizations as empty report groups, by name."""
        stmt = (
            select(Organization.id, Organization.name)
            .where(
                Organization.type == OrganizationType.CONTRACTOR,
                ~Organization.name.ilike(TEST_ORGANIZATION_PATTERN),
            )
            .order_by(Organization.name.asc())
        )
        return [TripGroup(id=row.id, name=row.name, trip_count=0) for row in self.db.execute(stmt).all()]

    # Report queries

    def _report_trip_filter(self, stmt, date_from: date, date_to_exclusive: date, statuses: list[str] | None):
        stmt = stmt.where(
            Trip.entry_at >= _start_of(date_from),
            Trip.entry_at < _start_of(date_to_exclusive),
        )
        if statuses:
            stmt = stmt.where(Trip.status.in_(statuses))
        return stmt

    def trip_counts_by_polygon(
        self,
        contractor_id: uuid.UUID,
        date_from: date,
        date_to_exclusive: date,
        statuses: list[str] | None = None,
    ) -> list[TripGroup]:
        """Trips of a contractor grouped by polygon."""
        stmt = (
            select(Trip.polygon_id, Polygon.name, func.count(Trip.id).label("trip_count"))
            .outerjoin(Polygon, Polygon.id == Trip.polygon_id)
            .where(Trip.contractor_id == contractor_id)
            .group_by(Trip.polygon_id, Polygon.name)
            .order_by(Polygon.name.asc())
        )
        stmt = self._report_trip_filter(stmt, date_from, date_to_exclusive, statuses)
        return [
            TripGroup(id=row.polygon_id, name=row.name, trip_count=int(row.trip_count))
            for row in self.db.execute(stmt).all()
        ]

    def trip_counts_by_contractor(
        self,
        polygon_id: uuid.UUID,
        date_from: date,
        date_to_exclusive: date,
        statuses: list[str] | None = None,
    ) -> list[TripGroup]:
        """Trips unloaded at a polygon grouped by non-test contractor."""
        stmt = (
            select(Trip.contractor_id, Organization.name, func.count(Trip.id).label("trip_count"))
            .join(Organization, Organization.id == Trip.contractor_id)
            .where(
                Trip.polygon_id == polygon_id,
                Organization.type == OrganizationType.CONTRACTOR,
                ~Organization.name.ilike(TEST_ORGANIZATION_PATTERN),
            )
            .group_by(Trip.contractor_id, Organization.name)
            .order_by(Organization.name.asc())
        )
        stmt = self._report_trip_filter(stmt, date_from, date_to_exclusive, statuses)
        return [
            TripGroup(id=row.contractor_id, name=row.name, trip_count=int(row.trip_count))
            for row in self.db.execute(stmt).all()
        ]

    def list_trip_details(
        self,
        mode: ReportMode,
        target_id: uuid.UUID,
        group_id: uuid.UUID,
        date_from: date,
        date_to_exclusive: date,
        statuses: list[str] | None = None,
    ) -> list[TripDetail]:
        """Trip rows of one report group, oldest first."""
        if mode is ReportMode.CONTRACTOR:
            scope = (Trip.contractor_id == target_id, Trip.polygon_id == group_id)
        else:
            scope = (Trip.polygon_id == target_id, Trip.contractor_id == group_id)

        stmt = (
            select(Trip, Polygon.name.label("polygon_name"), Organization.name.label("contractor_name"))
            .outerjoin(Polygon, Polygon.id == Trip.polygon_id)
            .outerjoin(Organization, Organization.id == Trip.contractor_id)
            .where(*scope)
            .order_by(Trip.entry_at.asc(), Trip.id.asc())
        )
        stmt = self._report_trip_filter(stmt, date_from, date_to_exclusive, statuses)

        details = []
        for trip, polygon_name, contractor_name in self.db.execute(stmt).all():
            details.append(
                TripDetail(
                    id=trip.id,
                    entry_at=trip.entry_at,
                    exit_at=trip.exit_at,
                    status=trip.status,
                    polygon_id=trip.polygon_id,
                    polygon_name=polygon_name,
                    contractor_id=trip.contractor_id,
                    contractor_name=contractor_name,
                    vehicle_plate_number=trip.vehicle_plate_number,
                    detected_plate_number=trip.detected_plate_number,
                    detected_volume_entry=trip.detected_volume_entry,
                    detected_volume_exit=trip.detected_volume_exit,
                    total_volume_m3=trip.total_volume_m3,
                )
            )
        return details


__all__ = ["LedgerGateway"]
