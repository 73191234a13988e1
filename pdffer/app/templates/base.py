"""
Template lifecycle.

Every document template obeys the same strict state machine:

    CREATED ──set_payload──▶ PAYLOAD_SET ──validate()=True──▶ VALIDATED
                                 ▲                                 │
                                 │                            generate()
                                 │                                 ▼
                                 └─────────set_payload─────── GENERATED

Lifecycle guarantees:
- ``validate()`` and ``generate()`` raise ``MissingPayloadError`` until a
  payload has been set.
- ``validate()`` returning False is a normal outcome. The state stays at
  PAYLOAD_SET and the caller decides whether to retry with a fixed payload.
- Setting a payload from any state returns the instance to PAYLOAD_SET and
  discards previously generated content, so stale bytes are never served
  for a new payload.
- ``generate()`` fully regenerates on every call. Renderer failures surface
  as ``TemplateGenerationError``; on failure no content is stored.
- Typed conversion (``set_payload_from_map`` / ``set_payload_from_text``)
  never touches the stored payload when conversion fails.

Whether a payload was validated before ``generate()`` is the caller's
responsibility; the lifecycle does not enforce it.

Concurrency: an instance is NOT safe for concurrent use. Callers serialise
lifecycle calls per instance, or obtain prototype-scoped instances from the
registry (one per request).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from pydantic import ValidationError

from pdffer.app.templates.exceptions import (
    MissingPayloadError,
    PayloadFormatError,
    PdfTemplateError,
    TemplateGenerationError,
)
from pdffer.app.templates.identity import TemplateIdentity
from pdffer.app.templates.mapper import PayloadMapper, default_mapper
from pdffer.app.templates.path import format_template_path
from pdffer.app.templates.protocols import PassthroughHooks, PayloadHooks, PdfRenderer


logger = logging.getLogger(__name__)

P = TypeVar("P")


class TemplateState(str, Enum):
    CREATED = "created"
    PAYLOAD_SET = "payload_set"
    VALIDATED = "validated"
    GENERATED = "generated"


def _type_name(tp: Any) -> str:
    module = getattr(tp, "__module__", None)
    qualname = getattr(tp, "__qualname__", None)
    if module and qualname:
        return f"{module}.{qualname}"
    return repr(tp)


class PdfTemplate(Generic[P]):
    """
    Base class of all document templates.

    Concrete templates declare, as class attributes:

    - ``payload_type``: the payload shape (any type pydantic validates)
    - ``default_renderer``: the ``PdfRenderer`` producing the document
    - ``default_hooks``: optional ``PayloadHooks`` (defaults to passthrough)

    ``identity`` is attached by the registry at registration time.
    Hooks, renderer and mapper may also be injected per instance.
    """

    identity: ClassVar[Optional[TemplateIdentity]] = None

    payload_type: ClassVar[Any] = None

    default_hooks: ClassVar[PayloadHooks] = PassthroughHooks()

    default_renderer: ClassVar[Optional[PdfRenderer]] = None

    def __init__(
        self,
        *,
        hooks: Optional[PayloadHooks] = None,
        renderer: Optional[PdfRenderer] = None,
        mapper: Optional[PayloadMapper] = None,
    ) -> None:
        if self.payload_type is None:
            raise TypeError(f"{type(self).__name__} does not declare a payload_type")

        self.hooks: PayloadHooks = hooks if hooks is not None else self.default_hooks
        resolved_renderer = renderer if renderer is not None else self.default_renderer
        if resolved_renderer is None:
            raise TypeError(f"{type(self).__name__} has no renderer")
        self.renderer: PdfRenderer = resolved_renderer
        self.mapper: PayloadMapper = mapper if mapper is not None else default_mapper()

        self._payload: Optional[P] = None
        self._pdf_content: Optional[bytes] = None
        self._state = TemplateState.CREATED

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @classmethod
    def own_identity(cls) -> Optional[TemplateIdentity]:
        """
        Identity registered for exactly this class.

        Subclasses do not inherit the identity of a registered parent.
        """
        return vars(cls).get("identity")

    @classmethod
    def template_path(cls) -> Optional[str]:
        """Encoded path of this template type, ``None`` if unregistered."""
        identity = cls.own_identity()
        if identity is None:
            return None
        return identity.path

    def describe(self) -> str:
        """
        Diagnostic identity string: ``path{from=<payload type>,scope=<scope>}``.

        Never parsed back.
        """
        identity = self.own_identity()
        if identity is None:
            return f"{type(self).__name__}{{from={_type_name(self.payload_type)},scope=unregistered}}"
        return (
            f"{identity.path}"
            f"{{from={_type_name(self.payload_type)},scope={identity.scope}}}"
        )

    def __str__(self) -> str:
        return self.describe()

    def _label(self) -> str:
        path = self.template_path()
        return format_template_path(path) if path is not None else type(self).__name__

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> TemplateState:
        return self._state

    @property
    def payload(self) -> Optional[P]:
        return self._payload

    def _transition(self, state: TemplateState) -> None:
        logger.debug("template %s: %s -> %s", self._label(), self._state.value, state.value)
        self._state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_payload(self, payload: P) -> None:
        """
        Store ``payload`` after passing it through ``hooks.init_payload``.

        If the hook raises, nothing is stored and the state is unchanged.

        Raises:
            MissingPayloadError: ``payload`` is ``None``, or the hook
                returned ``None``. Nothing is stored.
        """
        if payload is None:
            raise MissingPayloadError(self._label())
        prepared = self.hooks.init_payload(payload)
        if prepared is None:
            raise MissingPayloadError(self._label())
        self._payload = prepared
        self._pdf_content = None
        self._transition(TemplateState.PAYLOAD_SET)

    def validate(self) -> bool:
        """
        Check whether the stored payload is ready to generate.

        Raises:
            MissingPayloadError: no payload has ever been set.
        """
        if self._payload is None:
            raise MissingPayloadError(self._label())

        valid = bool(self.hooks.validate_payload(self._payload))
        if valid and self._state is TemplateState.PAYLOAD_SET:
            self._transition(TemplateState.VALIDATED)
        return valid

    def generate(self) -> None:
        """
        Render the stored payload and keep the result for ``get_pdf_content``.

        Raises:
            MissingPayloadError: no payload has ever been set.
            TemplateGenerationError: the renderer failed or returned non-bytes.
        """
        if self._payload is None:
            raise MissingPayloadError(self._label())

        try:
            content = self.renderer.render(self, self._payload)
        except PdfTemplateError:
            raise
        except Exception as exc:
            raise TemplateGenerationError(
                f"Rendering failed for template {self._label()}: {exc}"
            ) from exc

        if not isinstance(content, (bytes, bytearray)):
            raise TemplateGenerationError(
                f"Renderer for template {self._label()} returned "
                f"{type(content).__name__}, expected bytes"
            )

        self._pdf_content = bytes(content)
        self._transition(TemplateState.GENERATED)

    def get_pdf_content(self) -> Optional[bytes]:
        """Bytes produced by the last ``generate()``, or ``None``."""
        return self._pdf_content

    # ------------------------------------------------------------------
    # Typed conversion
    # ------------------------------------------------------------------

    def set_payload_from_map(self, mapping: Mapping[str, Any]) -> None:
        """
        Convert a generic mapping into ``payload_type`` and set it.

        Raises:
            PayloadFormatError: the mapping does not fit ``payload_type``.
                The stored payload is left untouched.
        """
        try:
            payload = self.mapper.from_map(mapping, self.payload_type)
        except (ValidationError, TypeError) as exc:
            raise PayloadFormatError(map=mapping, cause=exc) from exc
        self.set_payload(payload)

    def set_payload_from_text(self, text: str) -> None:
        """
        Parse JSON text into ``payload_type`` and set it.

        Raises:
            PayloadFormatError: the text is not valid JSON or does not fit
                ``payload_type``. The stored payload is left untouched.
        """
        try:
            payload = self.mapper.from_text(text, self.payload_type)
        except (ValidationError, TypeError) as exc:
            raise PayloadFormatError(text=text, cause=exc) from exc
        self.set_payload(payload)
