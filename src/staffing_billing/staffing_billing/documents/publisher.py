from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..invoices.model import Invoice
from .pdf_renderer import InvoicePdfRenderer
from .storage import DocumentStorage, StoredDocument

logger = logging.getLogger(__name__)

INVOICE_FOLDER = "invoices"
MERGED_INVOICE_FOLDER = "merged-invoices"


def folder_for(invoice: Invoice) -> str:
    return MERGED_INVOICE_FOLDER if invoice.is_merged else INVOICE_FOLDER


class InvoiceDocumentPublisher:
    """Render and store invoice PDFs on a best-effort basis.

    A failure here never fails the invoice operation that triggered it:
    ``publish`` returns ``None`` and ``discard`` returns ``False``, and
    both log a warning.
    """

    def __init__(self, renderer: InvoicePdfRenderer, storage: DocumentStorage):
        self._renderer = renderer
        self._storage = storage

    def render(self, invoice: Invoice, sources: Sequence[Invoice] = ()) -> bytes:
        return self._renderer.render(invoice, sources)

    def publish(self, invoice: Invoice, sources: Sequence[Invoice] = ()) -> Optional[StoredDocument]:
        try:
            data = self._renderer.render(invoice, sources)
            return self._storage.upload(data, folder=folder_for(invoice), file_name=f"{invoice.invoice_number}.pdf")
        except Exception:
            logger.warning("Could not publish PDF for %s", invoice.invoice_number, exc_info=True)
            return None

    def discard(self, invoice: Invoice) -> bool:
        if not invoice.file.storage_id:
            return False
        try:
            self._storage.delete(invoice.file.storage_id)
            return True
        except Exception:
            logger.warning("Could not delete document %s", invoice.file.storage_id, exc_info=True)
            return False
