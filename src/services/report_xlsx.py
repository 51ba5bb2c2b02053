"""XLSX renderer for trip reports: a summary sheet plus one sheet per group."""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from src.services.act_utils import VOLUME_PLACES, round_half_away
from src.services.domain import ActReport, TripGroup

SUMMARY_SHEET = "Summary"
MAX_SHEET_NAME = 31

# Characters Excel refuses in sheet titles
_SHEET_NAME_INVALID = re.compile(r"[\[\]:*?/\\]")

DETAIL_HEADERS = [
    "Trip ID",
    "Entry At",
    "Exit At",
    "Status",
    "Polygon ID",
    "Polygon Name",
    "Contractor ID",
    "Contractor Name",
    "Vehicle Plate",
    "Detected Plate",
    "Volume Entry",
    "Volume Exit",
    "Volume M3",
]


def _date(value: date | None) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _datetime(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


def _id(value: uuid.UUID | None) -> str:
    return str(value) if value else ""


def _volume(value: Decimal | None):
    return round_half_away(value, VOLUME_PLACES) if value is not None else ""


def sanitize_sheet_name(value: str) -> str:
    value = _SHEET_NAME_INVALID.sub("-", (value or "").strip()).strip()
    return value or "Sheet"


def build_sheet_name(group_label: str, group: TripGroup, used: set[str]) -> str:
    """Unique sheet title of at most 31 characters for a group."""
    name = (group.name or "").strip()
    base = f"{group_label} - {name}" if name else f"{group_label} - {_id(group.id) or 'unknown'}"
    base = sanitize_sheet_name(base)[:MAX_SHEET_NAME]

    candidate = base
    counter = 2
    while candidate in used:
        suffix = f"-{counter}"
        candidate = base[: MAX_SHEET_NAME - len(suffix)] + suffix
        counter += 1
    return candidate


class ReportXlsxRenderer:
    """Renders an ActReport into an XLSX workbook."""

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    extension = "xlsx"

    def generate(self, report: ActReport) -> bytes:
        workbook = Workbook()
        summary = workbook.active
        summary.title = SUMMARY_SHEET
        self._write_summary(summary, report)

        used = {SUMMARY_SHEET}
        for group in report.groups:
            title = build_sheet_name(report.mode.group_label, group, used)
            used.add(title)
            self._write_detail(workbook.create_sheet(title), report, group)

        workbook.active = 0
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def _write_header(self, sheet: Worksheet, rows: list[tuple[str, object]]) -> None:
        for index, (label, value) in enumerate(rows, start=1):
            sheet.cell(row=index, column=1, value=label)
            sheet.cell(row=index, column=2, value=value)

    def _write_summary(self, sheet: Worksheet, report: ActReport) -> None:
        mode = report.mode
        self._write_header(
            sheet,
            [
                ("Report Type", mode.target_label),
                ("Target", report.target.name),
                ("Target ID", _id(report.target.id)),
                ("Period Start", _date(report.period_start)),
                ("Period End", _date(report.period_end)),
                ("Total Trips", report.total_trips),
                ("Total Volume M3", _volume(report.total_volume)),
            ],
        )

        table_row = 9
        for column, header in enumerate(["ID", mode.group_label, "Trip Count", "Volume M3"], start=1):
            sheet.cell(row=table_row, column=column, value=header)
        for offset, group in enumerate(report.groups, start=1):
            row = table_row + offset
            sheet.cell(row=row, column=1, value=_id(group.id))
            sheet.cell(row=row, column=2, value=group.name or "")
            sheet.cell(row=row, column=3, value=group.trip_count)
            sheet.cell(row=row, column=4, value=_volume(group.total_volume))

        for column, width in zip("ABCD", (38, 45, 16, 16)):
            sheet.column_dimensions[column].width = width

    def _write_detail(self, sheet: Worksheet, report: ActReport, group: TripGroup) -> None:
        mode = report.mode
        self._write_header(
            sheet,
            [
                ("Report Type", mode.target_label),
                ("Target", report.target.name),
                ("Target ID", _id(report.target.id)),
                (mode.group_label, group.name or ""),
                ("Group ID", _id(group.id)),
                ("Period Start", _date(report.period_start)),
                ("Period End", _date(report.period_end)),
                ("Trip Count", group.trip_count),
                ("Total Volume M3", _volume(group.total_volume)),
            ],
        )

        table_row = 11
        for column, header in enumerate(DETAIL_HEADERS, start=1):
            sheet.cell(row=table_row, column=column, value=header)
        for offset, trip in enumerate(group.trips, start=1):
            values = [
                _id(trip.id),
                _datetime(trip.entry_at),
                _datetime(trip.exit_at),
                trip.status,
                _id(trip.polygon_id),
                trip.polygon_name or "",
                _id(trip.contractor_id),
                trip.contractor_name or "",
                trip.vehicle_plate_number or "",
                trip.detected_plate_number or "",
                _volume(trip.detected_volume_entry),
                _volume(trip.detected_volume_exit),
                _volume(trip.volume),
            ]
            for column, value in enumerate(values, start=1):
                sheet.cell(row=table_row + offset, column=column, value=value)

        widths = {"A": 36, "B": 20, "C": 20, "D": 14, "E": 36, "F": 28, "G": 36, "H": 28,
                  "I": 16, "J": 16, "K": 14, "L": 14, "M": 14}
        for column, width in widths.items():
            sheet.column_dimensions[column].width = width


__all__ = ["ReportXlsxRenderer", "build_sheet_name", "sanitize_sheet_name"]
