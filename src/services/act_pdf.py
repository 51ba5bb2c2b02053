"""PDF renderer for acts of completed works."""

from decimal import Decimal

from src.models import ContractType
from src.services.domain import ActDocument, OrganizationInfo
from src.services.pdf_writer import PdfWriter, trim

COUNTERPARTY_LABELS = {
    ContractType.CONTRACTOR_SERVICE: "Contractor",
    ContractType.LANDFILL_SERVICE: "Landfill",
}


def _money(value) -> str:
    return f"{Decimal(value):,.2f}".replace(",", " ")


def _volume(value) -> str:
    return f"{Decimal(value):.3f}"


class ActPdfRenderer:
    """Renders an ActDocument into a one or two page PDF."""

    def __init__(self, font_path: str | None = None):
        self.font_path = font_path

    def generate(self, doc: ActDocument) -> bytes:
        act = doc.act
        contract = doc.contract
        pdf = PdfWriter(self.font_path)

        pdf.line(f"ACT OF COMPLETED WORKS No. {act.act_number}", size=14, gap=6)
        pdf.line(f"Date: {act.act_date:%d.%m.%Y}")
        pdf.line(f"Period: {act.period_start:%d.%m.%Y} - {act.period_end:%d.%m.%Y}")
        pdf.line(f"Contract: {contract.name}")
        pdf.line(f"Status: {act.status.value}", gap=10)

        self._party(pdf, "Customer", contract.customer)
        counterparty_label = COUNTERPARTY_LABELS[contract.contract_type]
        self._party(pdf, counterparty_label, contract.counterparty)

        pdf.rule()
        pdf.row([("Description of work", 250), ("Volume, m3", 80), ("Price", 80), ("Amount", 100)])
        pdf.rule()
        pdf.row(
            [
                (trim(doc.work_description, 48), 250),
                (_volume(act.total_volume_m3), 80),
                (_money(act.price_per_m3), 80),
                (_money(act.amount_wo_vat), 100),
            ]
        )
        pdf.rule()
        pdf.skip(6)

        pdf.line(f"Amount excluding VAT: {_money(act.amount_wo_vat)}")
        pdf.line(f"VAT {Decimal(act.vat_rate):.2f}%: {_money(act.vat_amount)}")
        pdf.line(f"Amount including VAT: {_money(act.amount_with_vat)}", size=11, gap=10)

        pdf.line(f"Paid under the contract before this act: {_money(doc.paid_before)}")
        if contract.budget_total > 0:
            pdf.line(f"Contract budget: {_money(contract.budget_total)}")
        if doc.budget_exceeded:
            pdf.line("WARNING: contract budget exceeded", size=11)

        if act.rejection_reason:
            pdf.line(f"Rejection reason: {act.rejection_reason}")

        pdf.skip(24)
        pdf.row([("Customer: ____________________", 260), (f"{counterparty_label}: ____________________", 260)])
        pdf.row([(contract.customer.head_full_name, 260), (contract.counterparty.head_full_name, 260)], size=8)

        return pdf.tobytes()

    @staticmethod
    def _party(pdf: PdfWriter, label: str, org: OrganizationInfo) -> None:
        pdf.line(f"{label}: {org.name}", size=11)
        if org.bin:
            pdf.line(f"BIN: {org.bin}", indent=12)
        if org.address:
            pdf.line(f"Address: {org.address}", indent=12)
        if org.phone:
            pdf.line(f"Phone: {org.phone}", indent=12)
        if org.head_full_name:
            pdf.line(f"Head: {org.head_full_name}", indent=12)
        pdf.skip(6)


__all__ = ["ActPdfRenderer"]
