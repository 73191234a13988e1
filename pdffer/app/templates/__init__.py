from pdffer.app.templates.base import PdfTemplate, TemplateState
from pdffer.app.templates.exceptions import (
    DuplicateTemplateError,
    MissingPayloadError,
    PayloadFormatError,
    PdfTemplateError,
    TemplateGenerationError,
    TemplateNotFoundError,
)
from pdffer.app.templates.identity import (
    SCOPE_DEFAULT,
    SCOPE_PROTOTYPE,
    SCOPE_SINGLETON,
    TemplateIdentity,
)
from pdffer.app.templates.mapper import PayloadMapper, default_mapper
from pdffer.app.templates.path import (
    GROUP_SEPARATOR,
    ROOT_REGISTRY,
    format_template_path,
    get_template_path,
    split_template_path,
)
from pdffer.app.templates.protocols import PassthroughHooks, PayloadHooks, PdfRenderer
from pdffer.app.templates.registry import (
    TEMPLATE_REGISTRY,
    TemplateEntry,
    TemplateRegistry,
    pdf_template,
)

__all__ = [
    "DuplicateTemplateError",
    "GROUP_SEPARATOR",
    "MissingPayloadError",
    "PassthroughHooks",
    "PayloadFormatError",
    "PayloadHooks",
    "PayloadMapper",
    "PdfRenderer",
    "PdfTemplate",
    "PdfTemplateError",
    "ROOT_REGISTRY",
    "SCOPE_DEFAULT",
    "SCOPE_PROTOTYPE",
    "SCOPE_SINGLETON",
    "TEMPLATE_REGISTRY",
    "TemplateEntry",
    "TemplateGenerationError",
    "TemplateIdentity",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateState",
    "default_mapper",
    "format_template_path",
    "get_template_path",
    "pdf_template",
    "split_template_path",
]
