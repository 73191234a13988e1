"""
Canonical payload serialization and content hashing.

Generated documents carry a hash of the payload they were rendered from,
so that a PDF can later be tied back to its input.

IMPORTANT DESIGN RULE:
- ``canonicalize_payload`` is the only place that decides the canonical
  byte form of a payload.
- ``compute_document_hash`` hashes bytes, and bytes only.
"""

import hashlib
import json
from decimal import Decimal
from typing import Any, Mapping, Union


def _canonical_json_default(obj: Any) -> str:
    if isinstance(obj, Decimal):
        return str(obj)
    raise TypeError(
        f"Object of type {obj.__class__.__name__} is not JSON serializable"
    )


def canonicalize_payload(payload: Mapping[str, Any]) -> bytes:
    """
    Deterministic JSON bytes for a JSON-compatible payload mapping.

    Keys are sorted, separators are compact and non-ASCII text is kept
    verbatim as UTF-8.
    """
    return json.dumps(
        payload,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        default=_canonical_json_default,
    ).encode("utf-8")


def compute_document_hash(canonical_bytes: Union[bytes, bytearray]) -> str:
    """
    Compute a human-readable SHA-256 hash of canonical payload bytes.

    Returns:
        A hash string with an explicit algorithm prefix.
        Example: ``SHA-256:3b7c0e4c...``
    """
    if not isinstance(canonical_bytes, (bytes, bytearray)):
        raise TypeError(
            "compute_document_hash expects canonical bytes, "
            f"got {type(canonical_bytes).__name__}"
        )

    digest = hashlib.sha256(canonical_bytes).hexdigest()
    return f"SHA-256:{digest}"
