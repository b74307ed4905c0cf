from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.staffing_billing.staffing_billing.companies.model import Company
from src.staffing_billing.staffing_billing.core.enums import InvoiceStatus
from src.staffing_billing.staffing_billing.documents.pdf_renderer import InvoicePdfRenderer
from src.staffing_billing.staffing_billing.documents.publisher import InvoiceDocumentPublisher
from src.staffing_billing.staffing_billing.documents.storage import StoredDocument
from src.staffing_billing.staffing_billing.invoices.merge_service import InvoiceMergeService
from src.staffing_billing.staffing_billing.invoices.model import Invoice, InvoiceFilter
from src.staffing_billing.staffing_billing.invoices.numbering import InvoiceNumberGenerator
from src.staffing_billing.staffing_billing.invoices.service import InvoiceService

NOW = datetime(2026, 3, 15, 10, 0, 0)


class FakeCompanyRepo:
    def __init__(self, *companies: Company):
        self._companies = {c.company_id: c for c in companies}

    def get_by_id(self, company_id):
        return self._companies.get(int(company_id))


class FakeSequenceRepo:
    def __init__(self):
        self.values: dict[str, int] = {}

    def next_value(self, name):
        self.values[name] = self.values.get(name, 0) + 1
        return self.values[name]


class FakeInvoiceRepo:
    def __init__(self, companies: FakeCompanyRepo):
        self._companies = companies
        self._next_id = 1
        self._rows: dict[int, Invoice] = {}
        self.fail_on_create = False

    def create(self, invoice):
        if self.fail_on_create:
            raise RuntimeError("insert failed")
        if any(i.invoice_number == invoice.invoice_number for i in self._rows.values()):
            raise RuntimeError(f"duplicate invoice number {invoice.invoice_number}")

        iid = self._next_id
        self._next_id += 1
        company = self._companies.get_by_id(invoice.company_id)
        self._rows[iid] = Invoice(
            invoice_id=iid,
            invoice_number=invoice.invoice_number,
            company=company.ref(),
            file=invoice.file,
            rates=invoice.rates,
            bill_details=invoice.bill_details,
            attendance=invoice.attendance,
            employees=list(invoice.employees),
            due_date=invoice.due_date,
            # strictly increasing so "newest first" is deterministic
            created_at=NOW + timedelta(minutes=iid),
            bill_to=invoice.bill_to,
            status=invoice.status,
            payment_status=invoice.payment_status,
            notes=invoice.notes,
            is_merged=invoice.is_merged,
            source_invoice_ids=tuple(invoice.source_invoice_ids),
            merged_company_ids=tuple(invoice.merged_company_ids),
        )
        return self._rows[iid]

    def get_by_id(self, invoice_id):
        return self._rows.get(int(invoice_id))

    def get_many(self, invoice_ids):
        return [self._rows[int(i)] for i in invoice_ids if int(i) in self._rows]

    def _matches(self, inv: Invoice, flt: InvoiceFilter) -> bool:
        if flt.company_id is not None and inv.company_id != flt.company_id:
            return False
        if flt.status is not None and inv.status != flt.status:
            return False
        if flt.payment_status is not None and inv.payment_status != flt.payment_status:
            return False
        if flt.is_merged is not None and inv.is_merged != flt.is_merged:
            return False
        if flt.created_from is not None and inv.created_at < flt.created_from:
            return False
        if flt.created_to is not None and inv.created_at >= flt.created_to:
            return False
        if flt.exclude_cancelled and inv.status == InvoiceStatus.CANCELLED:
            return False
        return True

    def list(self, flt, *, limit, offset=0, newest_first=True):
        rows = sorted(
            (i for i in self._rows.values() if self._matches(i, flt)),
            key=lambda i: i.created_at,
            reverse=newest_first,
        )
        return rows[offset : offset + limit]

    def count(self, flt):
        return sum(1 for i in self._rows.values() if self._matches(i, flt))

    def update_fields(self, *, invoice_id, status=None, payment_status=None, payment_date=None, bill_to=None, notes=None):
        inv = self._rows.get(int(invoice_id))
        if not inv:
            return False
        changes = {
            "status": status,
            "payment_status": payment_status,
            "payment_date": payment_date,
            "bill_to": bill_to,
            "notes": notes,
        }
        self._rows[inv.invoice_id] = replace(inv, **{k: v for k, v in changes.items() if v is not None})
        return True

    def attach_document(self, *, invoice_id, file):
        inv = self._rows.get(int(invoice_id))
        if not inv:
            return False
        self._rows[inv.invoice_id] = replace(inv, file=file)
        return True

    def delete(self, invoice_id):
        return self._rows.pop(int(invoice_id), None) is not None

    def set_status(self, invoice_id, status):
        self._rows[invoice_id] = replace(self._rows[invoice_id], status=status)


class MemoryStorage:
    def __init__(self, *, fail: bool = False):
        self.files: dict[str, bytes] = {}
        self.fail = fail

    def upload(self, data, *, folder, file_name):
        if self.fail:
            raise OSError("storage unavailable")
        storage_id = f"{folder}/{file_name}"
        self.files[storage_id] = data
        return StoredDocument(storage_id=storage_id, url=f"/uploads/{storage_id}", file_name=file_name, size=len(data))

    def delete(self, storage_id):
        self.files.pop(storage_id, None)


class FailingRenderer:
    def render(self, invoice, sources=()):
        raise RuntimeError("renderer crashed")


@pytest.fixture
def companies():
    return FakeCompanyRepo(
        Company(company_id=1, name="Alpha Industries", address="Plot 4, GIDC, Vapi", gst_number="24AAACA1234A1Z5"),
        Company(company_id=2, name="Beta Logistics", address="Sector 12, Surat", gst_number="24AAACB5678B1Z3"),
        Company(company_id=3, name="Gamma Foods", address="", gst_number=None),
    )


@pytest.fixture
def invoice_repo(companies):
    return FakeInvoiceRepo(companies)


@pytest.fixture
def sequences():
    return FakeSequenceRepo()


@pytest.fixture
def numbers(sequences):
    return InvoiceNumberGenerator(sequences, clock=lambda: NOW)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def publisher(storage):
    renderer = InvoicePdfRenderer(business_name="ASHAPURI SECURITY SERVICES", tagline="Security & Manpower Solutions")
    return InvoiceDocumentPublisher(renderer, storage)


@pytest.fixture
def invoice_service(invoice_repo, companies, numbers, publisher):
    return InvoiceService(invoice_repo, companies, numbers, clock=lambda: NOW, documents=publisher)


@pytest.fixture
def merge_service(invoice_repo, numbers, invoice_service, publisher):
    return InvoiceMergeService(invoice_repo, numbers, invoice_service, documents=publisher, clock=lambda: NOW)


@pytest.fixture
def create_invoice(invoice_service):
    """Create an ordinary invoice through the real pipeline."""

    def _create(company_id: int = 1, rows: Optional[list] = None, **rates):
        rows = rows if rows is not None else [{"name": "Ravi", "presentDays": 26, "totalDays": 30}]
        return invoice_service.create_invoice(company_id=company_id, attendance_rows=rows, rates=rates).invoice

    return _create


@pytest.fixture
def failing_publisher():
    return InvoiceDocumentPublisher(FailingRenderer(), MemoryStorage())


@pytest.fixture
def broken_storage_publisher():
    renderer = InvoicePdfRenderer(business_name="ASHAPURI SECURITY SERVICES")
    return InvoiceDocumentPublisher(renderer, MemoryStorage(fail=True))
