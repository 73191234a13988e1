"""
Document template registry.

This module is the template factory boundary. Each entry explicitly binds
together:

- a template identity (group, name, scope) and its encoded path
- the template class that is instantiated for that path
- a human-readable description

Templates are registered by an explicit call (``register`` or the
``template`` decorator) executed when their module is imported. Nothing is
discovered reflectively; plugin distributions advertise the modules to
import through entry points (see ``load_entry_points``).

Scope handling:
- ``prototype``: ``create`` returns a fresh instance on every call
- ``singleton``: ``create`` returns one shared instance, built lazily.
  Shared instances are not safe for concurrent use; callers must exclude
  that themselves.
"""

from __future__ import annotations

import logging
import threading
from importlib.metadata import entry_points
from typing import Callable, Dict, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from pdffer.app.templates.base import PdfTemplate
from pdffer.app.templates.exceptions import (
    DuplicateTemplateError,
    TemplateNotFoundError,
)
from pdffer.app.templates.identity import (
    SCOPE_DEFAULT,
    SCOPE_SINGLETON,
    TemplateIdentity,
)
from pdffer.app.templates.path import (
    ROOT_REGISTRY,
    format_template_path,
    get_template_path,
)


logger = logging.getLogger(__name__)

TemplateT = TypeVar("TemplateT", bound=Type[PdfTemplate])


class TemplateEntry(BaseModel):
    """
    Declarative description of a registered document template.
    """

    identity: TemplateIdentity
    template_cls: Type[PdfTemplate]
    description: str = ""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
    )

    @property
    def path(self) -> str:
        return self.identity.path

    @property
    def payload_type(self) -> object:
        return self.template_cls.payload_type


class TemplateRegistry:
    """Explicit ``path -> TemplateEntry`` map with scope-aware creation."""

    def __init__(self) -> None:
        self._entries: Dict[str, TemplateEntry] = {}
        self._singletons: Dict[str, PdfTemplate] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        template_cls: Type[PdfTemplate],
        *,
        name: str,
        group: str = ROOT_REGISTRY,
        scope: str = SCOPE_DEFAULT,
        description: str = "",
    ) -> TemplateEntry:
        """
        Attach an identity to ``template_cls`` and record it.

        Raises:
            DuplicateTemplateError: the path is already registered, or
                ``template_cls`` is already registered under another path.
            ValueError: empty name or unknown scope.
            TypeError: ``template_cls`` is not a ``PdfTemplate`` subclass.
        """
        if not (isinstance(template_cls, type) and issubclass(template_cls, PdfTemplate)):
            raise TypeError(f"{template_cls!r} is not a PdfTemplate subclass")

        # pydantic's ValidationError is a ValueError subclass
        identity = TemplateIdentity(group=group, name=name, scope=scope)

        with self._lock:
            if identity.path in self._entries:
                raise DuplicateTemplateError(identity.path)
            existing = template_cls.own_identity()
            if existing is not None:
                raise DuplicateTemplateError(existing.path, template_cls=template_cls)
            template_cls.identity = identity
            entry = TemplateEntry(
                identity=identity,
                template_cls=template_cls,
                description=description,
            )
            self._entries[identity.path] = entry

        logger.debug(
            "registered template %s (%s, scope=%s)",
            format_template_path(identity.path),
            template_cls.__qualname__,
            identity.scope,
        )
        return entry

    def template(
        self,
        *,
        name: str,
        group: str = ROOT_REGISTRY,
        scope: str = SCOPE_DEFAULT,
        description: str = "",
    ) -> Callable[[TemplateT], TemplateT]:
        """Decorator form of ``register``."""

        def decorator(template_cls: TemplateT) -> TemplateT:
            self.register(
                template_cls,
                name=name,
                group=group,
                scope=scope,
                description=description,
            )
            return template_cls

        return decorator

    def unregister(self, path: str) -> None:
        with self._lock:
            entry = self._entries.pop(path, None)
            self._singletons.pop(path, None)
        if entry is None:
            raise TemplateNotFoundError(path)
        entry.template_cls.identity = None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_entry(self, path: str) -> TemplateEntry:
        entry = self._entries.get(path)
        if entry is None:
            raise TemplateNotFoundError(path)
        return entry

    def get_entry_for(self, group: str, name: str) -> TemplateEntry:
        return self.get_entry(get_template_path(group, name))

    def create(self, path: str) -> PdfTemplate:
        """
        Produce a template instance for ``path``, honouring its scope.

        Raises:
            TemplateNotFoundError: nothing is registered under ``path``.
        """
        entry = self.get_entry(path)

        if entry.identity.scope != SCOPE_SINGLETON:
            return entry.template_cls()

        with self._lock:
            instance = self._singletons.get(path)
            if instance is None:
                instance = entry.template_cls()
                self._singletons[path] = instance
        return instance

    def entries(self) -> List[TemplateEntry]:
        return sorted(self._entries.values(), key=lambda e: e.identity.as_tuple())

    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries()]

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TemplateEntry]:
        return iter(self.entries())

    # ------------------------------------------------------------------
    # Plugin discovery
    # ------------------------------------------------------------------

    def load_entry_points(self, group: str = "pdffer.templates") -> List[str]:
        """
        Import every module advertised under the ``group`` entry point group.

        Importing a plugin module runs its registration calls. Import errors
        propagate: a broken plugin must fail startup, not vanish silently.

        Returns:
            The names of the loaded entry points.
        """
        loaded: List[str] = []
        for ep in entry_points(group=group):
            ep.load()
            loaded.append(ep.name)
            logger.debug("loaded template plugin %s (%s)", ep.name, ep.value)
        return loaded


TEMPLATE_REGISTRY = TemplateRegistry()


def pdf_template(
    *,
    name: str,
    group: str = ROOT_REGISTRY,
    scope: str = SCOPE_DEFAULT,
    description: str = "",
    registry: Optional[TemplateRegistry] = None,
) -> Callable[[TemplateT], TemplateT]:
    """
    Register a template class in ``registry`` (the process-wide registry by
    default).

    Example::

        @pdf_template(group="invoices", name="monthly")
        class MonthlyInvoiceTemplate(PdfTemplate[InvoicePayload]):
            payload_type = InvoicePayload
            default_renderer = TextPdfRenderer(...)
    """
    target = registry if registry is not None else TEMPLATE_REGISTRY
    return target.template(
        name=name,
        group=group,
        scope=scope,
        description=description,
    )
