"""
LaTeX rendering service.

Transforms a validated payload into a PDF using a Jinja2 LaTeX template
compiled by LuaLaTeX.

Design guarantees:
- Deterministic template rendering (Jinja2 + StrictUndefined)
- No shell escape or external execution from within the document
- Compilation halted on the first LaTeX error
- No payload transformation occurs in this module

Trust boundary:
- This module is presentation-only. Payload conversion and validation
  happen in the template lifecycle; content hashing and metadata binding
  happen downstream.

Jinja delimiters are chosen not to collide with LaTeX braces:

    \\VAR{ expression }      \\BLOCK{ statement }      \\#{ comment }
"""

import logging
import os
import subprocess
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from pdffer.app.config import get_settings
from pdffer.app.templates.mapper import PayloadMapper


logger = logging.getLogger(__name__)


class LaTeXCompilationError(RuntimeError):
    """Raised when LaTeX rendering or compilation fails."""


_LATEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def latex_escape(value: Any) -> str:
    """Jinja filter: escape LaTeX special characters in user text."""
    return "".join(_LATEX_SPECIALS.get(ch, ch) for ch in str(value))


@lru_cache(maxsize=8)
def _environment(template_root: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_root)),
        block_start_string=r"\BLOCK{",
        block_end_string="}",
        variable_start_string=r"\VAR{",
        variable_end_string="}",
        comment_start_string=r"\#{",
        comment_end_string="}",
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters["tex"] = latex_escape
    return env


def render_latex_source(
    *,
    template_path: str,
    context: Dict[str, Any],
    template_root: Path,
) -> str:
    """Render a Jinja2 LaTeX template to TeX source."""
    template = _environment(template_root.resolve()).get_template(template_path)
    return template.render(context)


def compile_latex_to_pdf(
    *,
    tex_source: str,
    template_root: Path,
    compiler: str = "lualatex",
    timeout: int = 60,
) -> bytes:
    """
    Compile TeX source in a scratch directory and return the PDF bytes.

    ``template_root`` is prepended to ``TEXINPUTS`` so that templates can
    ``\\input`` shared fragments and assets.
    """
    with tempfile.TemporaryDirectory() as tmp:
        outdir = Path(tmp)
        tex_file = outdir / "document.tex"
        tex_file.write_text(tex_source, encoding="utf-8")

        command = [
            compiler,
            "-interaction=nonstopmode",
            "-halt-on-error",
            "-no-shell-escape",
            f"-output-directory={outdir}",
            tex_file.name,
        ]

        env_vars = os.environ.copy()
        existing_texinputs = env_vars.get("TEXINPUTS", "")
        env_vars["TEXINPUTS"] = (
            f"{template_root.resolve()}{os.pathsep}{existing_texinputs}"
        )

        try:
            process = subprocess.run(
                command,
                cwd=outdir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
                env=env_vars,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise LaTeXCompilationError(
                f"Failed to invoke {compiler}: {exc}"
            ) from exc

        stdout = process.stdout.decode("utf-8", errors="ignore")
        stderr = process.stderr.decode("utf-8", errors="ignore")

        if process.returncode != 0:
            raise LaTeXCompilationError(
                f"{compiler} compilation failed.\n\n"
                "STDOUT:\n"
                f"{stdout}\n\n"
                "STDERR:\n"
                f"{stderr}"
            )

        pdf_file = outdir / "document.pdf"
        if not pdf_file.exists():
            raise LaTeXCompilationError(
                f"{compiler} reported success, but no PDF output was produced."
            )

        return pdf_file.read_bytes()


class LaTeXRenderer:
    """
    ``PdfRenderer`` backed by a Jinja2 LaTeX template.

    The payload is dumped to JSON-compatible data and exposed to the
    template both as top-level variables and as ``payload``. Compiler,
    timeout and template root come from settings unless given explicitly.
    """

    def __init__(
        self,
        template_path: str,
        *,
        template_root: Optional[Path] = None,
        compiler: Optional[str] = None,
        timeout: Optional[int] = None,
        mapper: Optional[PayloadMapper] = None,
    ) -> None:
        self.template_path = template_path
        self._template_root = template_root
        self._compiler = compiler
        self._timeout = timeout
        self._mapper = mapper

    def render(self, template: Any, payload: Any) -> bytes:
        settings = get_settings()
        template_root = self._template_root or settings.template_dir
        mapper = self._mapper or template.mapper

        data = mapper.dump(payload)
        context: Dict[str, Any] = dict(data) if isinstance(data, dict) else {}
        if "payload" in context:
            raise LaTeXCompilationError(
                "Render context collision on key 'payload'."
            )
        context["payload"] = data

        tex_source = render_latex_source(
            template_path=self.template_path,
            context=context,
            template_root=template_root,
        )

        compiler = self._compiler or settings.latex_compiler
        logger.debug("compiling %s with %s", self.template_path, compiler)
        return compile_latex_to_pdf(
            tex_source=tex_source,
            template_root=template_root,
            compiler=compiler,
            timeout=self._timeout or settings.latex_timeout_seconds,
        )
