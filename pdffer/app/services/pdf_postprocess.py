"""
PDF post-processing.

Binds provenance metadata into a generated document after rendering:

- the template path the document was produced by
- the content hash of the canonical payload

Both are written into XMP metadata under the PDFfer namespace, using
Clark notation for explicit namespace binding.

Trust boundary:
- This module does NOT interpret payloads or document content.
- The operation is deterministic and non-authoritative; it never changes
  the visual layout.
"""

import io

import pikepdf


PDFFER_XMP_NAMESPACE = "https://pdffer.nekosoft.org/ns/template/1.0/"

XMP_TEMPLATE_PATH = f"{{{PDFFER_XMP_NAMESPACE}}}templatePath"
XMP_CONTENT_HASH = f"{{{PDFFER_XMP_NAMESPACE}}}contentHash"


class PdfPostProcessError(RuntimeError):
    """Raised when PDF post-processing fails."""


def stamp_template_metadata(
    pdf_bytes: bytes,
    *,
    template_path: str,
    content_hash: str,
) -> bytes:
    """
    Return a copy of ``pdf_bytes`` with template provenance in XMP.

    Args:
        pdf_bytes:
            A structurally valid PDF.
        template_path:
            Human-readable template path (``group/name``).
        content_hash:
            Precomputed payload hash, e.g. ``SHA-256:...``.

    Raises:
        PdfPostProcessError:
            If the input is not a PDF or the metadata cannot be written.
    """
    if not content_hash.strip():
        raise PdfPostProcessError(
            "content_hash was provided but is empty or invalid."
        )

    output = io.BytesIO()
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            with pdf.open_metadata(set_pikepdf_as_editor=False) as meta:
                meta[XMP_TEMPLATE_PATH] = template_path
                meta[XMP_CONTENT_HASH] = content_hash
            pdf.save(output, deterministic_id=True)
    except pikepdf.PdfError as exc:
        raise PdfPostProcessError(
            f"Failed to bind template metadata into XMP: {exc}"
        ) from exc

    return output.getvalue()


def read_template_metadata(pdf_bytes: bytes) -> dict:
    """Read back the values written by ``stamp_template_metadata``."""
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            meta = pdf.open_metadata()
            return {
                "template_path": meta.get(XMP_TEMPLATE_PATH),
                "content_hash": meta.get(XMP_CONTENT_HASH),
            }
    except pikepdf.PdfError as exc:
        raise PdfPostProcessError(
            f"Failed to read template metadata: {exc}"
        ) from exc
