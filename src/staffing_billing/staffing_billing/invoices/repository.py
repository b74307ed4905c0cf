from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus, PaymentStatus
from .model import BillTo, Invoice, InvoiceFile, InvoiceFilter, NewInvoice


class InvoiceRepository(Protocol):
    def create(self, invoice: NewInvoice) -> Invoice:
        """Persist the invoice, its employees and provenance in one transaction."""

        raise NotImplementedError

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def get_many(self, invoice_ids: Sequence[int]) -> Sequence[Invoice]:
        raise NotImplementedError

    def list(
        self,
        flt: InvoiceFilter,
        *,
        limit: int,
        offset: int = 0,
        newest_first: bool = True,
    ) -> Sequence[Invoice]:
        raise NotImplementedError

    def count(self, flt: InvoiceFilter) -> int:
        raise NotImplementedError

    def update_fields(
        self,
        *,
        invoice_id: int,
        status: Optional[InvoiceStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        payment_date: Optional[datetime] = None,
        bill_to: Optional[BillTo] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Update lifecycle fields only; financial fields are never touched."""

        raise NotImplementedError

    def attach_document(self, *, invoice_id: int, file: InvoiceFile) -> bool:
        raise NotImplementedError

    def delete(self, invoice_id: int) -> bool:
        raise NotImplementedError


class SequenceRepository(Protocol):
    def next_value(self, name: str) -> int:
        """Atomically increment and return the named counter (first value is 1)."""

        raise NotImplementedError

