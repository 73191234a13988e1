"""
Monthly invoice template (``invoices/monthly``).
"""

from datetime import date
from typing import Iterable, List, Optional

from pdffer.app.schemas.invoice import InvoicePayload
from pdffer.app.services.text_pdf import TextPdfRenderer
from pdffer.app.templates.base import PdfTemplate
from pdffer.app.templates.registry import pdf_template


class InvoiceHooks:
    """
    Normalises the currency code and rejects future-dated invoices.

    Invoices are compared against ``reference_date``. Without one the
    current date is used, so the same payload may be rejected today and
    accepted once its date has passed.
    """

    def __init__(self, reference_date: Optional[date] = None) -> None:
        self.reference_date = reference_date

    def init_payload(self, payload: InvoicePayload) -> InvoicePayload:
        return payload.model_copy(update={"currency": payload.currency.upper()})

    def validate_payload(self, payload: InvoicePayload) -> bool:
        return payload.issued_on <= (self.reference_date or date.today())


def invoice_lines(payload: InvoicePayload) -> Iterable[str]:
    lines: List[str] = ["MONTHLY INVOICE", ""]
    if payload.customer:
        lines.append(f"Customer: {payload.customer}")
    lines.append(f"Date: {payload.date}")
    lines.append(f"Amount due: {payload.amount:.2f} {payload.currency}")
    return lines


@pdf_template(
    group="invoices",
    name="monthly",
    description="Single-page monthly invoice with amount, date and customer.",
)
class MonthlyInvoiceTemplate(PdfTemplate[InvoicePayload]):
    payload_type = InvoicePayload
    default_hooks = InvoiceHooks()
    default_renderer = TextPdfRenderer(invoice_lines)
