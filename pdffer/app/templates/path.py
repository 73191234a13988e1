"""
Template path codec.

A template is addressed by a two-part identity: a *group* (namespace) and
a *name*. Registry lookups and diagnostics need that identity as a single
opaque string, the *template path*.

Encoding rules:
- The root namespace is the empty string. Templates in the root namespace
  are addressed by their bare name.
- Any other group is joined to the name with ``GROUP_SEPARATOR``, a
  sequence of two ASCII group-separator control bytes bracketing a slash.
  Hand-written identifiers practically never contain it, so a plain
  ``/`` remains legal inside both group and name.

Decoding splits on the *first* separator occurrence. The round trip
``split_template_path(get_template_path(g, n)) == (g, n)`` therefore holds
whenever neither ``g`` nor ``n`` contains ``GROUP_SEPARATOR``. No validation
is performed in either direction; both functions are pure and never raise.
"""

from typing import Tuple


ROOT_REGISTRY = ""

GROUP_SEPARATOR = "\u001D/\u001D"


def get_template_path(group: str, name: str) -> str:
    """
    Compose the template path for ``(group, name)``.

    Root-namespace templates map to their bare name.
    """
    if group == ROOT_REGISTRY:
        return name
    return f"{group}{GROUP_SEPARATOR}{name}"


def split_template_path(path: str) -> Tuple[str, str]:
    """
    Decompose a template path into ``(group, name)``.

    A path without separator belongs to the root namespace; this is a
    valid case, not an error.
    """
    idx = path.find(GROUP_SEPARATOR)
    if idx < 0:
        return ROOT_REGISTRY, path
    return path[:idx], path[idx + len(GROUP_SEPARATOR):]


def format_template_path(path: str) -> str:
    """
    Human-readable rendering of a template path (``group/name``).

    PRESENTATION ONLY: the result is lossy and MUST NOT be parsed back.
    """
    return path.replace(GROUP_SEPARATOR, "/")
