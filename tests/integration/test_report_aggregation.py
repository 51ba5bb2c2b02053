"""Integration tests for contractor and landfill trip reports."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from src.services.authorization import Principal, Role
from src.services.domain import ReportFormat, ReportMode
from src.services.errors import InvalidInputError, NotFoundError, PermissionDeniedError
from src.services.report_service import ReportService

JANUARY = (date(2025, 1, 1), date(2025, 1, 31))


@pytest.fixture
def service(gateway, settings):
    return ReportService(gateway, settings=settings)


class TestContractorReport:
    def test_every_polygon_listed_with_counts(self, service, ledger, contractor_principal):
        report = service.build_report("contractor", ledger.contractor.id, *JANUARY, contractor_principal)

        assert report.mode is ReportMode.CONTRACTOR
        assert report.target.name == "Snow Service"
        assert [(g.name, g.trip_count) for g in report.groups] == [("North Polygon", 0), ("South Polygon", 3)]
        assert report.total_trips == 3

        south = report.groups[1]
        assert [t.volume for t in south.trips] == [Decimal("2.222"), Decimal("3.333"), Decimal("1.111")]
        assert [t.polygon_name for t in south.trips] == ["South Polygon"] * 3
        assert south.trips[0].entry_at < south.trips[1].entry_at
        assert report.total_volume == Decimal("6.666")
        assert report.groups[0].trips == []

    def test_rejected_and_out_of_period_trips_excluded(self, service, ledger, akimat_principal):
        report = service.build_report(ReportMode.CONTRACTOR, ledger.contractor.id, *JANUARY, akimat_principal)
        trip_ids = {t.id for g in report.groups for t in g.trips}
        assert ledger.rejected_trip.id not in trip_ids
        assert ledger.february_trip.id not in trip_ids

    def test_trips_without_polygon_appended(self, service, db_session, ledger, akimat_principal, trip_factory):
        trip_factory(
            contractor_id=ledger.contractor.id,
            entry_at=datetime(2025, 1, 5, 6, 0),
            detected_volume_entry=Decimal("1"),
        )
        db_session.commit()

        report = service.build_report("CONTRACTOR", ledger.contractor.id, *JANUARY, akimat_principal)

        assert [(g.id, g.trip_count) for g in report.groups][-1] == (None, 1)
        assert report.groups[-1].trips == []
        assert report.total_trips == 4

    def test_contractor_cannot_see_other_contractor(self, service, ledger, contractor_principal):
        with pytest.raises(PermissionDeniedError):
            service.build_report("CONTRACTOR", ledger.other_contractor.id, *JANUARY, contractor_principal)

    def test_landfill_cannot_request_contractor_mode(self, service, ledger, landfill_principal):
        with pytest.raises(PermissionDeniedError):
            service.build_report("CONTRACTOR", ledger.contractor.id, *JANUARY, landfill_principal)

    def test_unknown_target(self, service, ledger, akimat_principal):
        with pytest.raises(NotFoundError):
            service.build_report("CONTRACTOR", uuid.uuid4(), *JANUARY, akimat_principal)


class TestLandfillReport:
    def test_test_contractors_excluded(self, service, ledger, landfill_principal):
        report = service.build_report("landfill", ledger.north.id, *JANUARY, landfill_principal)

        assert report.target.name == "North Polygon"
        assert [(g.name, g.trip_count) for g in report.groups] == [("Alpha Clean", 1), ("Snow Service", 0)]
        assert report.total_trips == 1
        alpha = report.groups[0]
        assert alpha.trips[0].contractor_name == "Alpha Clean"
        assert alpha.trips[0].detected_volume_exit == Decimal("2")

    def test_quiet_polygon_lists_every_contractor_with_zero(self, service, ledger, akimat_principal):
        report = service.build_report("LANDFILL", ledger.north.id, date(2025, 3, 1), date(2025, 3, 31), akimat_principal)

        assert [(g.name, g.trip_count) for g in report.groups] == [("Alpha Clean", 0), ("Snow Service", 0)]
        assert report.total_trips == 0
        assert all(g.trips == [] for g in report.groups)

    def test_contractor_role_denied(self, service, ledger, contractor_principal):
        with pytest.raises(PermissionDeniedError):
            service.build_report("LANDFILL", ledger.north.id, *JANUARY, contractor_principal)

    def test_organization_id_is_not_a_polygon(self, service, ledger, landfill_principal):
        with pytest.raises(NotFoundError):
            service.build_report("LANDFILL", ledger.landfill.id, *JANUARY, landfill_principal)


class TestValidation:
    def test_unknown_mode(self, service, ledger, akimat_principal):
        with pytest.raises(InvalidInputError):
            service.build_report("POLYGON", ledger.north.id, *JANUARY, akimat_principal)

    def test_mode_checked_before_role(self, service, ledger):
        driver = Principal(org_id=uuid.uuid4(), user_id=uuid.uuid4(), role=Role.DRIVER)
        with pytest.raises(InvalidInputError):
            service.build_report("", ledger.north.id, *JANUARY, driver)

    def test_target_required(self, service, ledger, akimat_principal):
        with pytest.raises(InvalidInputError, match="target is required"):
            service.build_report("LANDFILL", None, *JANUARY, akimat_principal)

    def test_reversed_period(self, service, ledger, akimat_principal):
        with pytest.raises(InvalidInputError):
            service.build_report("LANDFILL", ledger.north.id, date(2025, 2, 1), date(2025, 1, 1), akimat_principal)


class TestGenerateReport:
    def test_xlsx(self, service, ledger, akimat_principal):
        generated = service.generate_report("CONTRACTOR", ledger.contractor.id, *JANUARY, akimat_principal)

        assert generated.file_name == "contractor-report-Snow-Service-20250101-20250131.xlsx"
        assert generated.media_type == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        workbook = load_workbook(BytesIO(generated.content))
        assert workbook.sheetnames == ["Summary", "Landfill - North Polygon", "Landfill - South Polygon"]
        assert workbook["Summary"]["B6"].value == 3

    def test_pdf(self, service, ledger, akimat_principal):
        generated = service.generate_report(
            "LANDFILL", ledger.north.id, *JANUARY, akimat_principal, fmt=ReportFormat.PDF
        )

        assert generated.file_name == "landfill-report-North-Polygon-20250101-20250131.pdf"
        assert generated.media_type == "application/pdf"
        assert generated.content.startswith(b"%PDF")
