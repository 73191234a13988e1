"""
Formal letter template (``letters/formal``), typeset with LuaLaTeX.
"""

from pdffer.app.schemas.letter import FormalLetterPayload
from pdffer.app.services.latex import LaTeXRenderer
from pdffer.app.templates.base import PdfTemplate
from pdffer.app.templates.registry import pdf_template


class FormalLetterHooks:
    def init_payload(self, payload: FormalLetterPayload) -> FormalLetterPayload:
        paragraphs = [p.strip() for p in payload.paragraphs if p.strip()]
        return payload.model_copy(update={"paragraphs": paragraphs})

    def validate_payload(self, payload: FormalLetterPayload) -> bool:
        # every paragraph may have been blank
        return bool(payload.paragraphs)


@pdf_template(
    group="letters",
    name="formal",
    description="Formal business letter typeset with LaTeX (requires LuaLaTeX).",
)
class FormalLetterTemplate(PdfTemplate[FormalLetterPayload]):
    payload_type = FormalLetterPayload
    default_hooks = FormalLetterHooks()
    default_renderer = LaTeXRenderer("letters/formal.tex.jinja")
