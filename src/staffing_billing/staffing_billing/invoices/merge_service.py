from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import parse_id, parse_ids
from ..core.constants import DEFAULT_INVOICE_DUE_DAYS, DEFAULT_PAGE_SIZE
from ..core.enums import FileType, InvoiceStatus, PaymentStatus
from ..core.exceptions import DocumentError, NotFoundError, ValidationError
from ..documents.publisher import InvoiceDocumentPublisher
from .merger import InvoiceMerger
from .model import Invoice, InvoiceFile, InvoiceFilter, Page
from .numbering import InvoiceNumberGenerator, InvoiceSeries
from .repository import InvoiceRepository
from .service import InvoiceService, default_due_date, scan, validate_notes
from .stats import admin_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    invoice: Invoice
    sources: Sequence[Invoice]
    pdf_generated: bool


@dataclass(frozen=True)
class MergedDetails:
    invoice: Invoice
    sources: Sequence[Invoice]


class InvoiceMergeService:
    """Admin operations: merging invoices and reporting across companies."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        numbers: InvoiceNumberGenerator,
        invoice_service: InvoiceService,
        *,
        merger: Optional[InvoiceMerger] = None,
        documents: Optional[InvoiceDocumentPublisher] = None,
        due_days: int = DEFAULT_INVOICE_DUE_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._invoices = invoices
        self._numbers = numbers
        self._invoice_service = invoice_service
        self._merger = merger or InvoiceMerger()
        self._documents = documents
        self._due_days = int(due_days)
        self._clock = clock or now_local

    def merge_invoices(self, invoice_ids: Any, *, notes: Optional[str] = None) -> MergeResult:
        """Create one merged invoice from at least two existing ones.

        Every precondition is checked before a number is allocated or
        anything is written. The PDF is best-effort: the merge succeeds
        with ``pdf_generated=False`` when rendering or storage fails.
        """
        if not isinstance(invoice_ids, (list, tuple)) or len(invoice_ids) < 2:
            raise ValidationError("At least 2 invoice IDs are required for merging")

        ids = parse_ids(invoice_ids, "invoice ID")
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate invoice IDs: {', '.join(map(str, duplicates))}")

        notes = validate_notes(notes)

        sources = list(self._invoices.get_many(ids))
        if len(sources) != len(ids):
            found = {s.invoice_id for s in sources}
            missing = [str(i) for i in ids if i not in found]
            raise NotFoundError(f"Invoices not found: {', '.join(missing)}")

        self._merger.check_sources(sources)

        number = self._numbers.next_number(InvoiceSeries.MERGED)
        new_invoice = self._merger.merge(
            sources,
            invoice_number=number,
            due_date=default_due_date(self._clock(), self._due_days),
            notes=notes,
        )
        merged = self._invoices.create(new_invoice)
        logger.info("Merged %d invoices into %s", len(sources), merged.invoice_number)

        pdf_generated = False
        if self._documents:
            stored = self._documents.publish(merged, sources)
            if stored:
                file = InvoiceFile(
                    file_name=stored.file_name,
                    file_type=FileType.PDF,
                    file_url=stored.url,
                    storage_id=stored.storage_id,
                    file_size=stored.size,
                )
                try:
                    self._invoices.attach_document(invoice_id=merged.invoice_id, file=file)
                    merged = self._invoices.get_by_id(merged.invoice_id) or merged
                    pdf_generated = True
                except Exception:
                    logger.warning("Could not attach PDF to %s", merged.invoice_number, exc_info=True)

        return MergeResult(invoice=merged, sources=sources, pdf_generated=pdf_generated)

    # -------- Listing --------
    def list_all(self, flt: Optional[InvoiceFilter] = None, *, page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE) -> Page:
        return self._invoice_service.list_invoices(flt, page=page, limit=limit)

    def list_merged(
        self,
        *,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_SIZE,
        status: Optional[InvoiceStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Page:
        flt = InvoiceFilter(is_merged=True, status=status, payment_status=payment_status)
        return self._invoice_service.list_invoices(flt, page=page, limit=limit)

    def available_for_merge(
        self,
        *,
        company_id: Any = None,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_SIZE,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Page:
        flt = InvoiceFilter(
            company_id=parse_id(company_id, "company ID") if company_id not in (None, "") else None,
            is_merged=False,
            exclude_cancelled=True,
            created_from=created_from,
            created_to=created_to,
        )
        return self._invoice_service.list_invoices(flt, page=page, limit=limit)

    def get_merged_details(self, invoice_id: Any) -> MergedDetails:
        invoice = self._merged(invoice_id)
        sources = self._invoices.get_many(invoice.source_invoice_ids)
        return MergedDetails(invoice=invoice, sources=list(sources))

    # -------- Delete --------
    def delete_merged(self, invoice_id: Any) -> Invoice:
        """Delete a merged invoice; its source invoices are left as they are."""
        invoice = self._merged(invoice_id)
        self._invoices.delete(invoice.invoice_id)
        logger.info("Deleted merged invoice %s", invoice.invoice_number)
        if self._documents:
            self._documents.discard(invoice)
        return invoice

    # -------- Reporting --------
    def admin_stats(self) -> dict[str, Any]:
        return admin_stats(scan(self._invoices, InvoiceFilter()))

    def document_url(self, invoice_id: Any) -> str:
        invoice = self._invoice_service.get_invoice(invoice_id)
        if not invoice.file.file_url:
            raise NotFoundError(f"No document for invoice {invoice.invoice_number}")
        return invoice.file.file_url

    def render_pdf(self, invoice_id: Any) -> tuple[str, bytes]:
        """Render the invoice PDF on demand, e.g. when the stored copy is missing."""
        if not self._documents:
            raise DocumentError("PDF rendering is not configured")
        invoice = self._invoice_service.get_invoice(invoice_id)
        sources = self._invoices.get_many(invoice.source_invoice_ids) if invoice.is_merged else ()
        return f"{invoice.invoice_number}.pdf", self._documents.render(invoice, sources)

    def _merged(self, invoice_id: Any) -> Invoice:
        invoice = self._invoice_service.get_invoice(invoice_id)
        if not invoice.is_merged:
            raise ValidationError(f"Invoice {invoice.invoice_number} is not a merged invoice")
        return invoice
