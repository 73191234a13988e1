"""
Point-of-sale receipt template (``receipt``, root namespace).

Registered with singleton scope: the registry hands out one shared
instance. Callers must not use it from several requests at once.
"""

from pdffer.app.schemas.receipt import ReceiptPayload
from pdffer.app.services.text_pdf import TextPdfRenderer
from pdffer.app.templates.base import PdfTemplate
from pdffer.app.templates.identity import SCOPE_SINGLETON
from pdffer.app.templates.registry import pdf_template


def receipt_lines(payload: ReceiptPayload):
    yield "RECEIPT"
    yield ""
    yield f"Date: {payload.date}"
    for item in payload.items:
        yield f"  - {item}"
    yield f"Total: {payload.amount:.2f}"


@pdf_template(
    name="receipt",
    scope=SCOPE_SINGLETON,
    description="Plain receipt listing purchased items and the total.",
)
class ReceiptTemplate(PdfTemplate[ReceiptPayload]):
    payload_type = ReceiptPayload
    default_renderer = TextPdfRenderer(receipt_lines, title="Receipt")
