"""
Centralized configuration for the PDFfer template engine.

Pydantic v2 settings management: every value is read from the environment
(prefix ``PDFFER_``) or an optional ``.env`` file, validated once, and
treated as immutable for the lifetime of the process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "latex_templates"


class Settings(BaseSettings):
    """
    Application settings parsed from the environment.

    Renderer binaries are not probed here; a missing LaTeX compiler only
    surfaces when a LaTeX-backed template is generated.
    """

    # ---------------------------------------------------------------------
    # Rendering
    # ---------------------------------------------------------------------

    template_dir: Annotated[
        Path,
        Field(
            default=DEFAULT_TEMPLATE_DIR,
            description="Root directory of Jinja2 LaTeX templates.",
        ),
    ]

    latex_compiler: Annotated[
        str,
        Field(
            default="lualatex",
            min_length=1,
            description="LaTeX executable invoked by the LaTeX renderer.",
        ),
    ]

    latex_timeout_seconds: Annotated[
        int,
        Field(
            default=60,
            ge=1,
            le=600,
            description="Hard upper bound for a single LaTeX compilation.",
        ),
    ]

    stamp_metadata: Annotated[
        bool,
        Field(
            default=True,
            description=(
                "Bind template path and content hash into the XMP metadata "
                "of documents served over HTTP."
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Payload conversion
    # ---------------------------------------------------------------------

    mapper_strict: Annotated[
        bool,
        Field(
            default=False,
            description=(
                "Use pydantic strict mode when converting maps and JSON text "
                "into payloads (no type coercion)."
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Template discovery
    # ---------------------------------------------------------------------

    entry_point_group: Annotated[
        str,
        Field(
            default="pdffer.templates",
            min_length=1,
            description="Entry point group scanned for template plugins.",
        ),
    ]

    # ---------------------------------------------------------------------
    # Logging
    # ---------------------------------------------------------------------

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(default="INFO"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="PDFFER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide settings provider.

    Cached; call ``get_settings.cache_clear()`` after changing the
    environment (tests only).
    """
    return Settings()
