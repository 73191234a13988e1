"""
Capabilities a template is composed of.

A template does not customise its lifecycle by overriding methods. It is
composed of two collaborators instead:

- ``PayloadHooks``: transforms an incoming payload and decides whether it
  is ready to generate
- ``PdfRenderer``: turns a payload into PDF bytes

Both are structural protocols; any object with matching methods qualifies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pdffer.app.templates.base import PdfTemplate


class PayloadHooks(Protocol):
    """
    Payload preparation and semantic validation.

    Implementations must be deterministic and free of I/O.
    """

    def init_payload(self, payload: Any) -> Any:
        """
        Transform or enrich a payload before it is stored.

        Whatever is returned becomes the stored payload.
        """
        ...

    def validate_payload(self, payload: Any) -> bool:
        """Return False when the payload is present but not fit to render."""
        ...


class PdfRenderer(Protocol):
    """
    External rendering boundary.

    ``render`` must either return the complete document bytes or raise.
    The bytes are opaque to the template core.
    """

    def render(self, template: "PdfTemplate[Any]", payload: Any) -> bytes:
        ...


class PassthroughHooks:
    """
    Default hooks.

    Stores payloads unchanged and accepts every payload as valid.
    """

    def init_payload(self, payload: Any) -> Any:
        return payload

    def validate_payload(self, payload: Any) -> bool:
        return True
