"""
Tests for the LaTeX rendering service.

The compiler binary is never executed here; ``subprocess.run`` and the
compile step are replaced where needed.
"""

import subprocess

import pytest

from pdffer.app.builtin.letters import FormalLetterTemplate
from pdffer.app.services import latex as latex_module
from pdffer.app.services.latex import (
    LaTeXCompilationError,
    LaTeXRenderer,
    compile_latex_to_pdf,
    latex_escape,
    render_latex_source,
)
from pdffer.app.templates.exceptions import TemplateGenerationError
from pdffer.tests.fixtures.templates import AmountPayload, make_template_class


LETTER = {
    "sender": "ACME & Sons",
    "recipient": "J. Doe",
    "date": "1 January 2024",
    "subject": "Invoice #42",
    "paragraphs": ["We owe you 100%.", "   ", "Regards_all"],
}


def test_latex_escape_handles_special_characters():
    assert latex_escape("50% & $5_#") == r"50\% \& \$5\_\#"
    assert latex_escape("a\\b") == r"a\textbackslash{}b"
    assert latex_escape("{~^}") == r"\{\textasciitilde{}\textasciicircum{}\}"
    assert latex_escape(12) == "12"


def test_render_latex_source_uses_latex_friendly_delimiters(tmp_path):
    (tmp_path / "doc.tex.jinja").write_text(
        "\\#{ ignored }\\BLOCK{ for x in items }[\\VAR{ x|tex }]\\BLOCK{ endfor }",
        encoding="utf-8",
    )

    source = render_latex_source(
        template_path="doc.tex.jinja",
        context={"items": ["a&b", "c"]},
        template_root=tmp_path,
    )

    assert source == r"[a\&b][c]"


def test_render_latex_source_rejects_undefined_variables(tmp_path):
    from jinja2 import UndefinedError

    (tmp_path / "doc.tex.jinja").write_text("\\VAR{ missing }", encoding="utf-8")

    with pytest.raises(UndefinedError):
        render_latex_source(
            template_path="doc.tex.jinja", context={}, template_root=tmp_path
        )


def _completed(args, returncode=0):
    return subprocess.CompletedProcess(args, returncode, stdout=b"out", stderr=b"err")


def test_compile_returns_pdf_written_by_compiler(tmp_path, monkeypatch):
    seen = {}

    def fake_run(command, *, cwd, env, **kwargs):
        seen["command"] = command
        seen["texinputs"] = env["TEXINPUTS"]
        assert (cwd / "document.tex").read_text(encoding="utf-8") == "\\relax"
        (cwd / "document.pdf").write_bytes(b"%PDF-1.7\n")
        return _completed(command)

    monkeypatch.setattr(latex_module.subprocess, "run", fake_run)

    content = compile_latex_to_pdf(
        tex_source="\\relax", template_root=tmp_path, compiler="lualatex"
    )

    assert content == b"%PDF-1.7\n"
    assert seen["command"][0] == "lualatex"
    assert "-no-shell-escape" in seen["command"]
    assert "-halt-on-error" in seen["command"]
    assert seen["texinputs"].startswith(str(tmp_path.resolve()))


def test_compile_reports_compiler_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(
        latex_module.subprocess,
        "run",
        lambda command, **kwargs: _completed(command, returncode=1),
    )

    with pytest.raises(LaTeXCompilationError, match="compilation failed"):
        compile_latex_to_pdf(tex_source="x", template_root=tmp_path)


def test_compile_reports_missing_output(tmp_path, monkeypatch):
    monkeypatch.setattr(
        latex_module.subprocess, "run", lambda command, **kwargs: _completed(command)
    )

    with pytest.raises(LaTeXCompilationError, match="no PDF output"):
        compile_latex_to_pdf(tex_source="x", template_root=tmp_path)


@pytest.mark.parametrize(
    "error",
    [FileNotFoundError("lualatex"), subprocess.TimeoutExpired("lualatex", 1)],
)
def test_compile_wraps_invocation_errors(tmp_path, monkeypatch, error):
    def fake_run(command, **kwargs):
        raise error

    monkeypatch.setattr(latex_module.subprocess, "run", fake_run)

    with pytest.raises(LaTeXCompilationError, match="Failed to invoke"):
        compile_latex_to_pdf(tex_source="x", template_root=tmp_path)


@pytest.fixture
def captured_tex(monkeypatch):
    captured = {}

    def fake_compile(*, tex_source, template_root, compiler, timeout):
        captured.update(
            tex_source=tex_source,
            template_root=template_root,
            compiler=compiler,
            timeout=timeout,
        )
        return b"%PDF-1.7\n%letter\n"

    monkeypatch.setattr(latex_module, "compile_latex_to_pdf", fake_compile)
    return captured


def test_formal_letter_renders_escaped_source(captured_tex, monkeypatch):
    monkeypatch.setenv("PDFFER_LATEX_COMPILER", "xelatex")
    monkeypatch.setenv("PDFFER_LATEX_TIMEOUT_SECONDS", "5")
    template = FormalLetterTemplate()
    template.set_payload_from_map(LETTER)

    template.generate()

    source = captured_tex["tex_source"]
    assert template.get_pdf_content() == b"%PDF-1.7\n%letter\n"
    assert r"\address{ACME \& Sons}" in source
    assert r"Invoice \#42" in source
    assert r"We owe you 100\%." in source
    assert r"Regards\_all" in source
    assert r"\closing{Yours faithfully,}" in source
    assert captured_tex["compiler"] == "xelatex"
    assert captured_tex["timeout"] == 5


def test_renderer_exposes_payload_variable(tmp_path, captured_tex):
    (tmp_path / "amount.tex.jinja").write_text(
        "\\VAR{ amount }/\\VAR{ payload.date }", encoding="utf-8"
    )
    cls = make_template_class(
        renderer=LaTeXRenderer(
            "amount.tex.jinja", template_root=tmp_path, compiler="pdflatex", timeout=3
        )
    )
    template = cls()
    template.set_payload(AmountPayload(amount=2.5, date="2024-02-01"))

    template.generate()

    assert captured_tex["tex_source"] == "2.5/2024-02-01"
    assert captured_tex["template_root"] == tmp_path
    assert captured_tex["compiler"] == "pdflatex"
    assert captured_tex["timeout"] == 3


def test_compilation_failure_surfaces_as_generation_error(monkeypatch):
    def failing_compile(**kwargs):
        raise LaTeXCompilationError("lualatex compilation failed.")

    monkeypatch.setattr(latex_module, "compile_latex_to_pdf", failing_compile)
    template = FormalLetterTemplate()
    template.set_payload_from_map(LETTER)

    with pytest.raises(TemplateGenerationError, match="letters/formal"):
        template.generate()

    assert template.get_pdf_content() is None
