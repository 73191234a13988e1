"""
Template discovery and schema introspection endpoints.

These endpoints expose the registered template catalogue and the exact
pydantic-derived JSON schemas used to convert request bodies into
payloads. Both routes are read-only and operate entirely from the
in-process registry.
"""

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pdffer.app.api.generate import get_registry
from pdffer.app.templates.exceptions import TemplateNotFoundError
from pdffer.app.templates.mapper import default_mapper
from pdffer.app.templates.path import (
    ROOT_REGISTRY,
    format_template_path,
    get_template_path,
)
from pdffer.app.templates.registry import TemplateEntry, TemplateRegistry


router = APIRouter(tags=["Templates"])


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TemplateListItem(BaseModel):
    group: str
    name: str
    path: str
    scope: str
    payload_type: str
    description: str


def _list_item(entry: TemplateEntry) -> TemplateListItem:
    payload_type = entry.payload_type
    return TemplateListItem(
        group=entry.identity.group,
        name=entry.identity.name,
        path=format_template_path(entry.path),
        scope=entry.identity.scope,
        payload_type=getattr(payload_type, "__name__", repr(payload_type)),
        description=entry.description,
    )


# ---------------------------------------------------------------------------
# GET /templates
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=List[TemplateListItem],
    summary="List registered document templates",
)
def list_templates(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
) -> List[TemplateListItem]:
    """Return all registered templates, ordered by group and name."""
    return [_list_item(entry) for entry in registry.entries()]


# ---------------------------------------------------------------------------
# GET /templates/schema/...
# ---------------------------------------------------------------------------


def _schema_for(registry: TemplateRegistry, path: str) -> Dict[str, Any]:
    try:
        entry = registry.get_entry(path)
    except TemplateNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=f"Template '{format_template_path(path)}' not found.",
        ) from exc

    return default_mapper().json_schema(entry.payload_type)


@router.get(
    "/schema/{name}",
    summary="Return the payload JSON schema of a root-namespace template",
)
def get_root_template_schema(
    name: str,
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
) -> Dict[str, Any]:
    return _schema_for(registry, get_template_path(ROOT_REGISTRY, name))


@router.get(
    "/schema/{group}/{name}",
    summary="Return the payload JSON schema of a grouped template",
)
def get_template_schema(
    group: str,
    name: str,
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
) -> Dict[str, Any]:
    return _schema_for(registry, get_template_path(group, name))
