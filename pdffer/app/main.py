"""
FastAPI entrypoint for the PDFfer template engine.

Bundled templates are registered at import time; plugin templates are
imported from entry points during startup so that a broken plugin fails
the process instead of disappearing from the catalogue.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI

import pdffer.app.builtin  # noqa: F401  (registers bundled templates)
from pdffer.app.api.generate import get_registry
from pdffer.app.api.generate import router as generate_router
from pdffer.app.api.templates import router as templates_router
from pdffer.app.config import Settings, get_settings


logger = logging.getLogger("pdffer.main")


def get_app_version() -> str:
    try:
        return version("pdffer")
    except PackageNotFoundError:
        return "0.1.0"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings)
    app.state.settings = settings

    registry = get_registry()
    plugins = registry.load_entry_points(settings.entry_point_group)
    logger.info(
        "template catalogue ready: %d templates, %d plugins",
        len(registry),
        len(plugins),
    )

    yield


def create_app() -> FastAPI:
    """Application factory."""
    app = FastAPI(
        title="PDFfer",
        description="Pluggable PDF document templates",
        version=get_app_version(),
        lifespan=lifespan,
    )

    app.include_router(templates_router, prefix="/templates")
    app.include_router(generate_router, prefix="/generate")

    @app.get("/healthz", tags=["Monitoring"], summary="Liveness probe")
    def health_check() -> dict:
        return {
            "status": "ok",
            "service": "pdffer",
            "version": app.version,
            "runtime": f"python {sys.version.split()[0]}",
        }

    return app


app = create_app()
