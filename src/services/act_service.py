"""Act generation and the landfill approval workflow."""

import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal

from src.models import Act, ActStatus
from src.services.act_pdf import ActPdfRenderer
from src.services.act_utils import (
    VOLUME_PLACES,
    build_act_number,
    compute_act_amounts,
    is_budget_exceeded,
    normalize_period,
    round_half_away,
    sanitize_file_name,
)
from src.services.authorization import (
    Principal,
    Role,
    authorize_act_decision,
    authorize_act_generation,
    authorize_act_view,
    authorize_contract_access,
    generation_roles,
    require_role,
)
from src.services.clock import Clock, SystemClock
from src.services.config import Settings, get_settings
from src.services.domain import ActDocument, ContractInfo, GeneratedAct, TripForAct
from src.services.errors import InvalidInputError, NoBillableTripsError, NotFoundError
from src.services.ledger_gateway import LedgerGateway

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ActStatus, frozenset[ActStatus]] = {
    ActStatus.PENDING_APPROVAL: frozenset({ActStatus.APPROVED, ActStatus.REJECTED}),
}


def ensure_transition(current: ActStatus, target: ActStatus) -> None:
    """Raise InvalidInputError unless ``current -> target`` is allowed."""
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidInputError("act is not pending approval")


class ActService:
    """Generates acts of completed works and drives their approval.

    Landfill-service acts start as PENDING_APPROVAL and are approved or
    rejected by the landfill; contractor-service acts are GENERATED and final.
    """

    def __init__(
        self,
        gateway: LedgerGateway,
        renderer: ActPdfRenderer | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.renderer = renderer or ActPdfRenderer(self.settings.pdf_font_path)
        self.clock = clock or SystemClock()

    def generate_act(
        self,
        contract_id: uuid.UUID,
        principal: Principal,
        period_start: date | datetime | None,
        period_end: date | datetime | None,
    ) -> GeneratedAct:
        """Bill all unclaimed trips of a contract for a period.

        Args:
            contract_id: Contract to bill
            principal: Caller
            period_start: First day of the period (inclusive)
            period_end: Last day of the period (inclusive)

        Returns:
            GeneratedAct with the rendered PDF and the persisted act

        Raises:
            PermissionDeniedError: If the caller may not generate acts for the contract
            InvalidInputError: If the period is invalid or outside the contract
            NotFoundError: If the contract does not exist
            NoBillableTripsError: If the period has no billable volume
            ActConflictError: If the act number or a trip claim is already taken
        """
        authorize_act_generation(principal, generation_roles(self.settings.generate_roles))
        start, end = normalize_period(period_start, period_end)

        contract = self.gateway.get_contract(contract_id)
        if contract is None:
            raise NotFoundError("contract not found")
        authorize_contract_access(principal, contract)
        self._check_contract_window(contract, start, end)

        trips = self._select_trips(contract, start, end + timedelta(days=1))
        total_volume = round_half_away(sum((t.volume_m3 for t in trips), Decimal("0")), VOLUME_PLACES)
        if total_volume <= 0:
            raise NoBillableTripsError("no trips for selected period")

        vat_rate = self.settings.acts_vat_rate
        amounts = compute_act_amounts(total_volume, contract.price_per_m3, vat_rate)
        paid_before = self.gateway.sum_acts(contract.id)
        budget_exceeded = is_budget_exceeded(contract.budget_total, paid_before, amounts.amount_wo_vat)
        if budget_exceeded:
            logger.warning(
                "Contract %s budget %s exceeded: paid %s + %s",
                contract.id,
                contract.budget_total,
                paid_before,
                amounts.amount_wo_vat,
            )

        act_date = self.clock.now().date()
        act = Act(
            contract_id=contract.id,
            contractor_id=contract.contractor_id,
            landfill_id=contract.landfill_id,
            act_number=build_act_number(self.settings.number_prefix, contract.id, act_date),
            act_date=act_date,
            period_start=start,
            period_end=end,
            total_volume_m3=total_volume,
            price_per_m3=contract.price_per_m3,
            amount_wo_vat=amounts.amount_wo_vat,
            vat_rate=vat_rate,
            vat_amount=amounts.vat_amount,
            amount_with_vat=amounts.amount_with_vat,
            status=ActStatus.PENDING_APPROVAL if contract.requires_approval else ActStatus.GENERATED,
            created_by_org_id=principal.org_id,
            created_by_user_id=principal.user_id,
        )
        act = self.gateway.create_act(act, [trip.id for trip in trips])
        logger.info(
            "Generated act %s for contract %s: %d trips, %s m3, %s with VAT",
            act.act_number,
            contract.id,
            len(trips),
            total_volume,
            amounts.amount_with_vat,
        )

        content = self.renderer.generate(
            ActDocument(
                act=act,
                contract=contract,
                work_description=self.settings.work_description,
                paid_before=paid_before,
                budget_exceeded=budget_exceeded,
            )
        )
        return GeneratedAct(
            file_name=f"act-{sanitize_file_name(act.act_number)}.pdf",
            content=content,
            act=act,
        )

    @staticmethod
    def _check_contract_window(contract: ContractInfo, start: date, end: date) -> None:
        if contract.start_date and start < contract.start_date:
            raise InvalidInputError(
                f"period_start ({start.isoformat()}) is before contract start date "
                f"({contract.start_date.isoformat()})"
            )
        if contract.end_date and end > contract.end_date:
            raise InvalidInputError(
                f"period_end ({end.isoformat()}) is after contract end date "
                f"({contract.end_date.isoformat()})"
            )

    def _select_trips(self, contract: ContractInfo, date_from: date, date_to_exclusive: date) -> list[TripForAct]:
        statuses = self.settings.valid_statuses
        if contract.requires_approval:
            polygon_ids = self.gateway.get_contract_polygon_ids(contract.id)
            if not polygon_ids:
                raise InvalidInputError("contract has no polygons")
            return self.gateway.list_trips_for_landfill_contract(
                contract.id, polygon_ids, date_from, date_to_exclusive, statuses
            )
        return self.gateway.list_trips_for_period(contract.id, date_from, date_to_exclusive, statuses)

    # Approval workflow

    def _load_for_decision(self, act_id: uuid.UUID, principal: Principal, target: ActStatus) -> Act:
        act = self.gateway.get_act_by_id(act_id)
        if act is None:
            raise NotFoundError("act not found")
        authorize_act_decision(principal, act)
        ensure_transition(act.status, target)
        return act

    def approve_act(self, act_id: uuid.UUID, principal: Principal) -> Act:
        """Approve a pending act on behalf of its landfill.

        Raises:
            PermissionDeniedError: If the caller is not the act's landfill
            NotFoundError: If the act does not exist
            InvalidInputError: If the act is not pending approval
        """
        require_role(principal, {Role.LANDFILL})
        act = self._load_for_decision(act_id, principal, ActStatus.APPROVED)

        updated = self.gateway.update_act_status(
            act.id,
            ActStatus.APPROVED,
            rejection_reason=None,
            approved_by_org_id=principal.org_id,
            approved_by_user_id=principal.user_id,
            approved_at=self.clock.now(),
            actor_org_id=principal.org_id,
            actor_user_id=principal.user_id,
        )
        if updated is None:
            raise NotFoundError("act not found")
        logger.info("Act %s approved by org %s", updated.act_number, principal.org_id)
        return updated

    def reject_act(self, act_id: uuid.UUID, principal: Principal, reason: str | None) -> Act:
        """Reject a pending act with a mandatory reason.

        Raises:
            PermissionDeniedError: If the caller is not the act's landfill
            InvalidInputError: If the reason is blank or the act is not pending approval
            NotFoundError: If the act does not exist
        """
        require_role(principal, {Role.LANDFILL})
        reason = (reason or "").strip()
        if not reason:
            raise InvalidInputError("rejection reason is required")
        act = self._load_for_decision(act_id, principal, ActStatus.REJECTED)

        updated = self.gateway.update_act_status(
            act.id,
            ActStatus.REJECTED,
            rejection_reason=reason,
            actor_org_id=principal.org_id,
            actor_user_id=principal.user_id,
        )
        if updated is None:
            raise NotFoundError("act not found")
        logger.info("Act %s rejected by org %s", updated.act_number, principal.org_id)
        return updated

    # Queries

    def get_act(self, act_id: uuid.UUID, principal: Principal) -> Act:
        act = self.gateway.get_act_by_id(act_id)
        if act is None:
            raise NotFoundError("act not found")
        authorize_act_view(principal, act)
        return act

    def list_acts_for_landfill(self, principal: Principal, status: ActStatus | str | None = None) -> list[Act]:
        """Acts of the caller's landfill, newest first."""
        require_role(principal, {Role.LANDFILL})
        if isinstance(status, str) and not isinstance(status, ActStatus):
            status = status.strip()
        if not status:
            status = None
        elif not isinstance(status, ActStatus):
            try:
                status = ActStatus(status.upper())
            except ValueError:
                raise InvalidInputError(f"invalid act status: {status!r}") from None
        return self.gateway.list_acts_for_landfill(principal.org_id, status)


__all__ = ["ActService", "ALLOWED_TRANSITIONS", "ensure_transition"]
