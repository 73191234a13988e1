"""
Document generation endpoint.

Clients supply an untyped JSON object; the template converts it into its
payload type, validates it and renders the PDF. Lifecycle per request:

    create → set_payload_from_map → validate → generate → get_pdf_content

The content hash of the canonical payload is computed after conversion
(so that defaults and hook normalisation are covered) and returned in the
X-Content-Hash response header. When enabled in settings, template path and
content hash are also bound into the PDF's XMP metadata.

Templates in the root namespace are addressed as ``/generate/{name}``,
all others as ``/generate/{group}/{name}``.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Annotated, Any, Dict, Iterator

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from pdffer.app.config import Settings, get_settings
from pdffer.app.services.pdf_postprocess import (
    PdfPostProcessError,
    stamp_template_metadata,
)
from pdffer.app.templates.exceptions import (
    MissingPayloadError,
    PayloadFormatError,
    TemplateGenerationError,
    TemplateNotFoundError,
)
from pdffer.app.templates.identity import SCOPE_SINGLETON
from pdffer.app.templates.path import (
    ROOT_REGISTRY,
    format_template_path,
    get_template_path,
)
from pdffer.app.templates.registry import (
    TEMPLATE_REGISTRY,
    TemplateEntry,
    TemplateRegistry,
)
from pdffer.app.utils.hashing import canonicalize_payload, compute_document_hash


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


def get_registry() -> TemplateRegistry:
    return TEMPLATE_REGISTRY


# Singleton-scoped instances are shared; requests for the same path are
# serialised here so that no two lifecycles interleave on one instance.
_singleton_locks: Dict[str, threading.Lock] = {}
_singleton_locks_guard = threading.Lock()


@contextmanager
def _exclusive(entry: TemplateEntry) -> Iterator[None]:
    if entry.identity.scope != SCOPE_SINGLETON:
        yield
        return

    with _singleton_locks_guard:
        lock = _singleton_locks.setdefault(entry.path, threading.Lock())
    with lock:
        yield


# ---------------------------------------------------------------------------
# Generation pipeline
# ---------------------------------------------------------------------------


def _generate_document(
    *,
    path: str,
    payload: Dict[str, Any],
    registry: TemplateRegistry,
    settings: Settings,
) -> Response:
    label = format_template_path(path)

    # ------------------------------------------------------------------
    # Template lookup
    # ------------------------------------------------------------------
    try:
        entry = registry.get_entry(path)
    except TemplateNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=f"Template '{label}' not found.",
        ) from exc

    with _exclusive(entry):
        template = registry.create(path)

        # --------------------------------------------------------------
        # Payload conversion and validation
        # --------------------------------------------------------------
        try:
            template.set_payload_from_map(payload)
        except PayloadFormatError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        try:
            valid = template.validate()
        except MissingPayloadError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        if not valid:
            raise HTTPException(
                status_code=422,
                detail=f"Payload was rejected by template '{label}'.",
            )

        # --------------------------------------------------------------
        # Rendering
        # --------------------------------------------------------------
        try:
            template.generate()
        except TemplateGenerationError as exc:
            logger.exception("PDF generation failed for template='%s'", label)
            raise HTTPException(
                status_code=500,
                detail="PDF generation failed. See server logs for details.",
            ) from exc

        pdf_bytes = template.get_pdf_content()
        content_hash = compute_document_hash(
            canonicalize_payload(template.mapper.dump(template.payload))
        )

    # ------------------------------------------------------------------
    # Provenance metadata
    # ------------------------------------------------------------------
    if settings.stamp_metadata:
        try:
            pdf_bytes = stamp_template_metadata(
                pdf_bytes,
                template_path=label,
                content_hash=content_hash,
            )
        except PdfPostProcessError as exc:
            logger.exception("Metadata stamping failed for template='%s'", label)
            raise HTTPException(
                status_code=500,
                detail="PDF post-processing failed. See server logs for details.",
            ) from exc

    _, name = entry.identity.as_tuple()
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{name}.pdf"',
            "X-Template-Path": label,
            "X-Content-Hash": content_hash,
        },
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/{name}",
    summary="Generate a PDF from a root-namespace template",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def generate_root_document(
    name: str,
    payload: Annotated[Dict[str, Any], Body(...)],
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    return _generate_document(
        path=get_template_path(ROOT_REGISTRY, name),
        payload=payload,
        registry=registry,
        settings=settings,
    )


@router.post(
    "/{group}/{name}",
    summary="Generate a PDF from a grouped template",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def generate_document(
    group: str,
    name: str,
    payload: Annotated[Dict[str, Any], Body(...)],
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    return _generate_document(
        path=get_template_path(group, name),
        payload=payload,
        registry=registry,
        settings=settings,
    )
