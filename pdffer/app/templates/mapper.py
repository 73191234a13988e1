"""
Structured-data mapper.

Converts untyped structured input (a generic mapping or JSON text) into
the strongly-typed payload a template expects, using pydantic
``TypeAdapter`` so that any type pydantic can validate is a valid payload
type: ``BaseModel`` subclasses, dataclasses, ``TypedDict`` and so on.

Contract:
- Conversion failures surface as ``pydantic.ValidationError``. Wrapping
  into ``PayloadFormatError`` is the template lifecycle's job, not ours.
- The mapper holds configuration only (``strict``), fixed at construction.
  It is stateless with respect to individual conversion calls and may be
  shared read-only across template instances.
"""

from functools import lru_cache
from typing import Any, Dict, Mapping, Type, TypeVar

from pydantic import TypeAdapter

from pdffer.app.config import get_settings


T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter_for(payload_type: Any) -> TypeAdapter:
    return TypeAdapter(payload_type)


class PayloadMapper:
    """Pydantic-backed converter from untyped data to payload instances."""

    def __init__(self, *, strict: bool = False) -> None:
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def from_map(self, mapping: Mapping[str, Any], payload_type: Type[T]) -> T:
        """Convert an in-memory mapping into ``payload_type``."""
        return _adapter_for(payload_type).validate_python(
            mapping, strict=self._strict
        )

    def from_text(self, text: str, payload_type: Type[T]) -> T:
        """Parse JSON text directly into ``payload_type``."""
        return _adapter_for(payload_type).validate_json(text, strict=self._strict)

    def dump(self, payload: Any) -> Dict[str, Any]:
        """
        JSON-compatible representation of a payload.

        Used for render contexts and content hashing; never fed back into
        ``from_map``.
        """
        return _adapter_for(type(payload)).dump_python(payload, mode="json")

    def json_schema(self, payload_type: Any) -> Dict[str, Any]:
        return _adapter_for(payload_type).json_schema()

    def __repr__(self) -> str:
        return f"PayloadMapper(strict={self._strict})"


@lru_cache(maxsize=1)
def default_mapper() -> PayloadMapper:
    """
    Process-wide mapper configured from settings.

    Created lazily on first use so that settings are read after the
    environment is in place.
    """
    return PayloadMapper(strict=get_settings().mapper_strict)
