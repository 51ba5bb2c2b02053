"""Unit tests for report group merging and file naming."""

import uuid
from datetime import date

from src.services.domain import ActReport, OrganizationInfo, ReportMode, TripGroup
from src.services.report_service import build_report_file_name, merge_groups

A, B, C, D = (uuid.uuid4() for _ in range(4))


class TestMergeGroups:
    def test_canonical_first_with_zero_counts(self):
        merged = merge_groups(
            [TripGroup(A, "Alpha"), TripGroup(B, "Beta"), TripGroup(C, "Gamma")],
            [TripGroup(B, "Beta", 5)],
        )
        assert [(g.id, g.trip_count) for g in merged] == [(A, 0), (B, 5), (C, 0)]

    def test_unmatched_appended_in_order(self):
        merged = merge_groups(
            [TripGroup(A, "Alpha")],
            [TripGroup(D, "Delta", 2), TripGroup(None, None, 3), TripGroup(A, "Alpha", 1)],
        )
        assert [(g.id, g.trip_count) for g in merged] == [(A, 1), (D, 2), (None, 3)]

    def test_blank_canonical_name_is_backfilled(self):
        merged = merge_groups([TripGroup(A, "")], [TripGroup(A, "Alpha", 4)])
        assert merged[0].name == "Alpha"

    def test_canonical_name_wins(self):
        merged = merge_groups([TripGroup(A, "Alpha")], [TripGroup(A, "Renamed", 4)])
        assert merged[0].name == "Alpha"

    def test_duplicate_canonical_ids_collapsed(self):
        merged = merge_groups([TripGroup(A, "Alpha"), TripGroup(A, "Alpha again")], [])
        assert len(merged) == 1

    def test_inputs_not_mutated(self):
        canonical = [TripGroup(A, "")]
        merge_groups(canonical, [TripGroup(A, "Alpha", 4)])
        assert canonical[0].trip_count == 0
        assert canonical[0].name == ""

    def test_empty(self):
        assert merge_groups([], []) == []


class TestReportFileName:
    def _report(self, name: str) -> ActReport:
        return ActReport(
            mode=ReportMode.LANDFILL,
            target=OrganizationInfo(id=A, name=name),
            period_start=date(2025, 1, 1),
            period_end=date(2025, 1, 31),
            total_trips=0,
            groups=[],
        )

    def test_uses_sanitized_target_name(self):
        name = build_report_file_name(self._report("North Polygon #1"), "xlsx")
        assert name == "landfill-report-North-Polygon--1-20250101-20250131.xlsx"

    def test_falls_back_to_target_id(self):
        name = build_report_file_name(self._report("???"), "pdf")
        assert name == f"landfill-report-{A}-20250101-20250131.pdf"
