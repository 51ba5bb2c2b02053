"""Trip reports for contractors and landfills (XLSX or PDF)."""

import logging
import uuid
from datetime import date, datetime, timedelta

from src.services.act_utils import normalize_period, sanitize_file_name
from src.services.authorization import Principal, authorize_report_mode, authorize_report_target
from src.services.config import Settings, get_settings
from src.services.domain import (
    ActReport,
    GeneratedReport,
    OrganizationInfo,
    ReportFormat,
    ReportMode,
    TripGroup,
)
from src.services.errors import InvalidInputError, NotFoundError
from src.services.ledger_gateway import LedgerGateway
from src.services.report_pdf import ReportPdfRenderer
from src.services.report_xlsx import ReportXlsxRenderer

logger = logging.getLogger(__name__)


def merge_groups(canonical: list[TripGroup], counted: list[TripGroup]) -> list[TripGroup]:
    """Combine the canonical group list with counted groups.

    Canonical groups come first, in their order and with zero counts unless a
    counted group has the same id; a blank canonical name is backfilled from
    the counted row. Counted groups unknown to the canonical list (e.g. trips
    with no polygon) are appended in order of first appearance.
    """
    merged: list[TripGroup] = []
    index: dict[uuid.UUID | None, TripGroup] = {}
    for group in canonical:
        if group.id in index:
            continue
        copy = TripGroup(id=group.id, name=group.name, trip_count=group.trip_count)
        index[group.id] = copy
        merged.append(copy)

    for row in counted:
        existing = index.get(row.id)
        if existing is not None:
            existing.trip_count = row.trip_count
            if not existing.name and row.name:
                existing.name = row.name
            continue
        copy = TripGroup(id=row.id, name=row.name, trip_count=row.trip_count)
        index[row.id] = copy
        merged.append(copy)
    return merged


def build_report_file_name(report: ActReport, extension: str) -> str:
    target = sanitize_file_name(report.target.name) or str(report.target.id)
    return (
        f"{report.mode.value.lower()}-report-{target}-"
        f"{report.period_start:%Y%m%d}-{report.period_end:%Y%m%d}.{extension}"
    )


class ReportService:
    """Builds trip reports grouped by the counterpart of the target."""

    def __init__(self, gateway: LedgerGateway, renderers: dict | None = None, settings: Settings | None = None):
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.renderers = renderers or {
            ReportFormat.XLSX: ReportXlsxRenderer(),
            ReportFormat.PDF: ReportPdfRenderer(self.settings.pdf_font_path),
        }

    def build_report(
        self,
        mode: ReportMode | str,
        target_id: uuid.UUID | None,
        period_start: date | datetime | None,
        period_end: date | datetime | None,
        principal: Principal,
    ) -> ActReport:
        """Aggregate trips of the target over a period.

        Args:
            mode: CONTRACTOR (target is a contractor) or LANDFILL (target is a polygon)
            target_id: Contractor organization or polygon id
            period_start: First day (inclusive)
            period_end: Last day (inclusive)
            principal: Caller

        Returns:
            ActReport with every canonical group, counted or not

        Raises:
            InvalidInputError: If mode, target or period are invalid
            PermissionDeniedError: If the caller may not see this report
            NotFoundError: If the target does not exist
        """
        mode = ReportMode.parse(mode)
        authorize_report_mode(principal, mode)
        if target_id is None:
            raise InvalidInputError("target is required")
        start, end = normalize_period(period_start, period_end)
        authorize_report_target(principal, mode, target_id)

        date_to_exclusive = end + timedelta(days=1)
        statuses = self.settings.valid_statuses

        if mode is ReportMode.CONTRACTOR:
            organization = self.gateway.get_organization(target_id)
            if organization is None:
                raise NotFoundError("contractor not found")
            target = OrganizationInfo.from_organization(organization)
            canonical = self.gateway.list_polygons()
            counted = self.gateway.trip_counts_by_polygon(target_id, start, date_to_exclusive, statuses)
        else:
            polygon = self.gateway.get_polygon(target_id)
            if polygon is None:
                raise NotFoundError("landfill not found")
            target = OrganizationInfo.from_polygon(polygon)
            canonical = self.gateway.list_contractors()
            counted = self.gateway.trip_counts_by_contractor(target_id, start, date_to_exclusive, statuses)

        groups = merge_groups(canonical, counted)
        total_trips = sum(group.trip_count for group in groups)

        for group in groups:
            if group.id is None:
                continue
            group.trips = self.gateway.list_trip_details(
                mode, target_id, group.id, start, date_to_exclusive, statuses
            )

        logger.info(
            "Built %s report for %s: %d groups, %d trips",
            mode.value,
            target_id,
            len(groups),
            total_trips,
        )
        return ActReport(
            mode=mode,
            target=target,
            period_start=start,
            period_end=end,
            total_trips=total_trips,
            groups=groups,
        )

    def generate_report(
        self,
        mode: ReportMode | str,
        target_id: uuid.UUID | None,
        period_start: date | datetime | None,
        period_end: date | datetime | None,
        principal: Principal,
        fmt: ReportFormat = ReportFormat.XLSX,
    ) -> GeneratedReport:
        """Build and render a report."""
        report = self.build_report(mode, target_id, period_start, period_end, principal)
        renderer = self.renderers[ReportFormat(fmt)]
        return GeneratedReport(
            file_name=build_report_file_name(report, renderer.extension),
            content=renderer.generate(report),
            media_type=renderer.media_type,
            report=report,
        )


__all__ = ["ReportService", "merge_groups", "build_report_file_name"]
