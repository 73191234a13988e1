"""
Template error hierarchy.

All core errors are raised synchronously to the immediate caller of the
failing operation. Nothing in the template core logs, retries or swallows
them; recovery policy belongs to the caller.

Validation returning ``False`` is not represented here: it is
a normal outcome meaning "payload present but not ready to generate".
"""

from typing import Any, Mapping, Optional


class PdfTemplateError(RuntimeError):
    """Base class for all template lifecycle and registry errors."""


class MissingPayloadError(PdfTemplateError):
    """
    Raised when an operation needs a payload but ``set_payload`` has never
    been called on the template instance.

    Recoverable: set a payload and retry.
    """

    def __init__(self, template: str = "") -> None:
        self.template = template
        message = "No payload has been set"
        if template:
            message = f"{message} on template {template}"
        super().__init__(message)


class PayloadFormatError(PdfTemplateError):
    """
    Raised when untyped input cannot be converted into the payload type.

    Exactly one of ``map`` and ``text`` carries the offending input; the
    other is ``None``. The underlying mapper failure is available as
    ``cause`` and is also chained as ``__cause__``.
    """

    def __init__(
        self,
        *,
        cause: BaseException,
        map: Optional[Mapping[str, Any]] = None,
        text: Optional[str] = None,
    ) -> None:
        self.map = map
        self.text = text
        self.cause = cause
        source = "text" if text is not None else "map"
        super().__init__(f"Invalid payload {source}: {cause}")

    @property
    def source(self) -> Any:
        """The original offending input, whichever form it arrived in."""
        return self.text if self.text is not None else self.map


class TemplateGenerationError(PdfTemplateError):
    """
    Raised when the renderer fails inside ``generate()``.

    Distinguishes a failed render from a renderer that returned empty bytes.
    The renderer error is chained as ``__cause__``.
    """


class TemplateNotFoundError(PdfTemplateError, LookupError):
    """Raised when no template is registered under a path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No template registered under {path!r}")


class DuplicateTemplateError(PdfTemplateError):
    """
    Raised when a second template is registered under an existing path, or
    when one template class is registered twice.

    ``path`` is the path already taken.
    """

    def __init__(self, path: str, *, template_cls: Optional[type] = None) -> None:
        self.path = path
        self.template_cls = template_cls
        if template_cls is None:
            message = f"A template is already registered under {path!r}"
        else:
            message = f"{template_cls.__qualname__} is already registered under {path!r}"
        super().__init__(message)
