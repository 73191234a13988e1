"""
Templates bundled with PDFfer.

Importing this package registers them in the process-wide registry.
"""

from pdffer.app.builtin import invoices, letters, receipts

__all__ = ["invoices", "letters", "receipts"]
