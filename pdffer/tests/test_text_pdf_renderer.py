import io

import pikepdf

from pdffer.app.services.text_pdf import TextPdfRenderer, build_text_pdf
from pdffer.app.templates.registry import TemplateRegistry
from pdffer.tests.fixtures.templates import AmountPayload, amount_lines, make_template_class


def _open(content: bytes) -> pikepdf.Pdf:
    return pikepdf.open(io.BytesIO(content))


def test_build_text_pdf_writes_lines_and_title():
    content = build_text_pdf("Statement", ["first line", "second (line)"])

    with _open(content) as pdf:
        assert str(pdf.docinfo.Title) == "Statement"
        assert len(pdf.pages) == 1
        stream = pdf.pages[0].Contents.read_bytes()

    assert b"(first line) Tj" in stream
    assert b"(second \\(line\\)) Tj" in stream


def test_build_text_pdf_is_deterministic():
    assert build_text_pdf("t", ["a", "b"]) == build_text_pdf("t", ["a", "b"])


def test_long_documents_are_paginated():
    content = build_text_pdf("long", [f"line {i}" for i in range(120)])

    with _open(content) as pdf:
        assert len(pdf.pages) == 3


def test_empty_document_still_has_a_page():
    with _open(build_text_pdf("empty", [])) as pdf:
        assert len(pdf.pages) == 1


def test_renderer_defaults_title_to_template_path():
    registry = TemplateRegistry()
    cls = make_template_class(renderer=TextPdfRenderer(amount_lines))
    registry.register(cls, group="statements", name="daily")
    template = cls()
    template.set_payload(AmountPayload(amount=3, date="2024-01-01"))

    template.generate()

    with _open(template.get_pdf_content()) as pdf:
        assert str(pdf.docinfo.Title) == "statements/daily"
        stream = pdf.pages[0].Contents.read_bytes()
    assert b"(Amount: 3) Tj" in stream


def test_text_uses_the_font_encoding():
    content = build_text_pdf("t", ["Total: 5 €", "Zoë", "日本"])

    with _open(content) as pdf:
        stream = pdf.pages[0].Contents.read_bytes()

    assert b"(Total: 5 \x80) Tj" in stream
    assert b"(Zo\xeb) Tj" in stream
    assert b"(??) Tj" in stream
