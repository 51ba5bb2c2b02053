"""PDF renderer for trip reports."""

from src.services.act_utils import VOLUME_PLACES, round_half_away
from src.services.domain import ActReport, ReportMode, TripDetail
from src.services.pdf_writer import PdfWriter, trim


def _related_name(mode: ReportMode, trip: TripDetail) -> str:
    if mode is ReportMode.LANDFILL:
        return trip.contractor_name or ""
    return trip.polygon_name or ""


class ReportPdfRenderer:
    """Renders an ActReport: summary table, then one page per non-empty group."""

    media_type = "application/pdf"
    extension = "pdf"

    def __init__(self, font_path: str | None = None):
        self.font_path = font_path

    def generate(self, report: ActReport) -> bytes:
        mode = report.mode
        pdf = PdfWriter(self.font_path)

        pdf.line("Act report", size=14, gap=6)
        pdf.line(f"Mode: {mode.value}", size=11)
        pdf.line(f"Organization: {report.target.name}", size=11)
        pdf.line(f"Period: {report.period_start:%Y-%m-%d} - {report.period_end:%Y-%m-%d}", size=11)
        pdf.line(f"Total trips: {report.total_trips}", size=11)
        pdf.line(f"Total volume (m3): {round_half_away(report.total_volume, 2)}", size=11, gap=10)

        pdf.rule()
        pdf.row([(mode.group_label, 260), ("Trips", 90), ("Volume (m3)", 90)], size=10)
        pdf.rule()
        for group in report.groups:
            pdf.row(
                [
                    (trim(group.name or "", 40), 260),
                    (str(group.trip_count), 90),
                    (str(round_half_away(group.total_volume, 2)), 90),
                ]
            )

        for group in report.groups:
            if not group.trips:
                continue
            pdf.new_page()
            pdf.line(f"{mode.group_label}: {group.name or ''}", size=12, gap=8)
            pdf.rule()
            pdf.row([("Date time", 110), ("Plate", 90), (mode.group_label, 180), ("Volume", 80)])
            pdf.rule()
            for trip in group.trips:
                plate = trip.vehicle_plate_number or trip.detected_plate_number or ""
                volume = round_half_away(trip.volume, VOLUME_PLACES) if trip.volume is not None else ""
                pdf.row(
                    [
                        (f"{trip.entry_at:%Y-%m-%d %H:%M:%S}", 110),
                        (trim(plate, 15), 90),
                        (trim(_related_name(mode, trip), 30), 180),
                        (str(volume), 80),
                    ],
                    size=8,
                )

        return pdf.tobytes()


__all__ = ["ReportPdfRenderer"]
