"""
Plain-text PDF renderer.

Builds a PDF directly with pikepdf: A4 pages, a single Helvetica font, one
line of text per payload line. No external binaries are involved, which
makes this renderer suitable for simple documents (receipts, statements)
and for environments without a TeX installation.

Design guarantees:
- Deterministic output for a given title and line sequence (static
  document ID, no timestamps)
- Text is encoded as PDF literal strings in cp1252, matching the
  font's WinAnsiEncoding; characters outside it are replaced
- Layout and typography are intentionally minimal
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence

import pikepdf
from pikepdf import Dictionary, Name, Stream

from pdffer.app.templates.path import format_template_path

if TYPE_CHECKING:
    from pdffer.app.templates.base import PdfTemplate


PAGE_SIZE = (595, 842)
MARGIN = 72
FONT_SIZE = 11
LEADING = 15

LineBuilder = Callable[[Any], Iterable[str]]


def _pdf_literal(text: str) -> bytes:
    escaped = (
        text.replace("\\", "\\\\")
        .replace("(", "\\(")
        .replace(")", "\\)")
        .replace("\r", " ")
        .replace("\n", " ")
    )
    return b"(" + escaped.encode("cp1252", errors="replace") + b")"


def _page_stream(lines: Sequence[str]) -> bytes:
    top = PAGE_SIZE[1] - MARGIN
    ops: List[bytes] = [
        b"BT",
        f"/F1 {FONT_SIZE} Tf".encode("ascii"),
        f"{LEADING} TL".encode("ascii"),
        f"{MARGIN} {top} Td".encode("ascii"),
    ]
    for i, line in enumerate(lines):
        if i:
            ops.append(b"T*")
        ops.append(_pdf_literal(line) + b" Tj")
    ops.append(b"ET")
    return b"\n".join(ops)


def _paginate(lines: Sequence[str]) -> List[Sequence[str]]:
    per_page = (PAGE_SIZE[1] - 2 * MARGIN) // LEADING
    pages = [lines[i:i + per_page] for i in range(0, len(lines), per_page)]
    return pages or [[]]


def build_text_pdf(title: str, lines: Sequence[str]) -> bytes:
    """Lay ``lines`` out on as many A4 pages as needed and return PDF bytes."""
    buffer = io.BytesIO()

    with pikepdf.new() as pdf:
        font = pdf.make_indirect(
            Dictionary(
                Type=Name.Font,
                Subtype=Name.Type1,
                BaseFont=Name.Helvetica,
                Encoding=Name.WinAnsiEncoding,
            )
        )

        for page_lines in _paginate(list(lines)):
            page = pdf.add_blank_page(page_size=PAGE_SIZE)
            page.Resources = Dictionary(Font=Dictionary(F1=font))
            page.Contents = pdf.make_indirect(Stream(pdf, _page_stream(page_lines)))

        pdf.docinfo[Name.Title] = pikepdf.String(title)
        pdf.save(buffer, deterministic_id=True)

    return buffer.getvalue()


class TextPdfRenderer:
    """
    ``PdfRenderer`` producing a plain-text PDF.

    Args:
        lines: callable turning a payload into the lines to print.
        title: document title; defaults to the template path in
            ``group/name`` form.
    """

    def __init__(self, lines: LineBuilder, *, title: Optional[str] = None) -> None:
        self._lines = lines
        self._title = title

    def render(self, template: "PdfTemplate[Any]", payload: Any) -> bytes:
        title = self._title
        if title is None:
            path = template.template_path()
            title = format_template_path(path) if path is not None else type(template).__name__
        return build_text_pdf(title, [str(line) for line in self._lines(payload)])
