from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from ..attendance.normalizer import AttendanceNormalizer
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, parse_id, require_gstin, require_length
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_INVOICE_DUE_DAYS, DEFAULT_PAGE_SIZE, MAX_NOTES_LENGTH, MAX_PAGE_SIZE
from ..core.enums import FileType, InvoiceStatus, PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..documents.publisher import InvoiceDocumentPublisher
from ..payroll.model import PayrollBatch
from ..payroll.register import build_salary_register
from ..payroll.service import PayrollService
from .calculator import InvoiceTotalsCalculator
from .model import BillTo, Invoice, InvoiceFile, InvoiceFilter, InvoiceTotals, NewInvoice, Page, RateConfig
from .numbering import InvoiceNumberGenerator, InvoiceSeries
from .rates import resolve_rate_config
from .repository import InvoiceRepository
from .stats import company_stats

logger = logging.getLogger(__name__)

SCAN_BATCH = 500


@dataclass(frozen=True)
class Calculation:
    """A full run of the pipeline without persistence."""

    rates: RateConfig
    batch: PayrollBatch
    totals: InvoiceTotals
    dropped: int


@dataclass(frozen=True)
class CreatedInvoice:
    invoice: Invoice
    calculation: Calculation


def default_due_date(now: datetime, due_days: int = DEFAULT_INVOICE_DUE_DAYS) -> date:
    return (now + timedelta(days=due_days)).date()


def validate_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise ValidationError("Notes must be text")
    return require_length(notes, "Notes", max_len=MAX_NOTES_LENGTH)


def validate_paging(page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    try:
        page_n = int(1 if page in (None, "") else page)
        limit_n = int(DEFAULT_PAGE_SIZE if limit in (None, "") else limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page_n < 1:
        raise ValidationError("page must be at least 1")
    if not 1 <= limit_n <= MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return page_n, limit_n


def scan(invoices: InvoiceRepository, flt: InvoiceFilter) -> Iterator[Invoice]:
    """Every invoice matching ``flt``, newest first, fetched in batches."""
    offset = 0
    while True:
        chunk = invoices.list(flt, limit=SCAN_BATCH, offset=offset)
        yield from chunk
        if len(chunk) < SCAN_BATCH:
            return
        offset += SCAN_BATCH


class InvoiceService:
    def __init__(
        self,
        invoices: InvoiceRepository,
        companies: CompanyRepository,
        numbers: InvoiceNumberGenerator,
        *,
        normalizer: Optional[AttendanceNormalizer] = None,
        payroll: Optional[PayrollService] = None,
        calculator: Optional[InvoiceTotalsCalculator] = None,
        due_days: int = DEFAULT_INVOICE_DUE_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
        documents: Optional[InvoiceDocumentPublisher] = None,
    ):
        self._invoices = invoices
        self._companies = companies
        self._numbers = numbers
        self._normalizer = normalizer or AttendanceNormalizer()
        self._payroll = payroll or PayrollService()
        self._calculator = calculator or InvoiceTotalsCalculator()
        self._due_days = int(due_days)
        self._clock = clock or now_local
        self._documents = documents

    # -------- Calculation --------
    def calculate(
        self,
        attendance_rows: Any,
        rates: Union[RateConfig, Mapping[str, Any], None] = None,
    ) -> Calculation:
        if not isinstance(attendance_rows, (list, tuple)):
            raise ValidationError("Attendance data must be a list of employee rows")
        if not isinstance(rates, RateConfig):
            rates = resolve_rate_config(rates)

        normalized = self._normalizer.normalize(attendance_rows)
        batch = self._payroll.process(
            normalized.records,
            per_day_rate=rates.per_day_rate,
            overtime_rate=rates.overtime_rate,
        )
        totals = self._calculator.calculate(batch.employees, rates)
        return Calculation(rates=rates, batch=batch, totals=totals, dropped=normalized.dropped)

    def preview_totals(self, attendance_rows: Any, rates: Union[RateConfig, Mapping[str, Any], None] = None) -> Calculation:
        return self.calculate(attendance_rows, rates)

    # -------- Create --------
    def create_invoice(
        self,
        *,
        company_id: Any,
        attendance_rows: Any,
        rates: Union[RateConfig, Mapping[str, Any], None] = None,
        file_name: Optional[str] = None,
        file_url: Optional[str] = None,
        bill_to: Optional[Mapping[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> CreatedInvoice:
        cid = parse_id(company_id, "company ID")
        company = self._companies.get_by_id(cid)
        if not company:
            raise NotFoundError(f"Company not found: {cid}")

        notes = validate_notes(notes)
        calc = self.calculate(attendance_rows, rates)
        resolved_bill_to = self._merge_bill_to(company.bill_to(), bill_to) if bill_to else company.bill_to()

        number = self._numbers.next_number(InvoiceSeries.ORDINARY)
        name = file_name or f"{number}.pdf"
        new_invoice = NewInvoice(
            invoice_number=number,
            company_id=cid,
            file=InvoiceFile(
                file_name=name,
                file_type=FileType.from_filename(name),
                file_url=file_url or "",
            ),
            rates=calc.rates,
            bill_details=calc.totals.bill_details,
            attendance=self._calculator.aggregate(
                calc.batch.employees,
                calc.totals,
                per_day_rate=calc.rates.per_day_rate,
                working_days=calc.batch.working_days,
            ),
            employees=calc.batch.employees,
            due_date=default_due_date(self._clock(), self._due_days),
            bill_to=resolved_bill_to,
            notes=notes,
        )

        invoice = self._invoices.create(new_invoice)
        logger.info(
            "Created invoice %s for company %s (%d employees, total %s)",
            invoice.invoice_number,
            cid,
            invoice.attendance.total_employees,
            invoice.bill_details.total_amount,
        )
        return CreatedInvoice(invoice=invoice, calculation=calc)

    # -------- Read --------
    def get_invoice(self, invoice_id: Any) -> Invoice:
        iid = parse_id(invoice_id, "invoice ID")
        invoice = self._invoices.get_by_id(iid)
        if not invoice:
            raise NotFoundError(f"Invoice not found: {iid}")
        return invoice

    def list_invoices(self, flt: Optional[InvoiceFilter] = None, *, page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE) -> Page:
        flt = flt or InvoiceFilter()
        page_n, limit_n = validate_paging(page, limit)
        items = self._invoices.list(flt, limit=limit_n, offset=(page_n - 1) * limit_n)
        return Page(items=list(items), total=self._invoices.count(flt), page=page_n, limit=limit_n)

    def list_company_invoices(
        self,
        company_id: Any,
        *,
        status: Optional[InvoiceStatus] = None,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_SIZE,
    ) -> Page:
        cid = parse_id(company_id, "company ID")
        return self.list_invoices(InvoiceFilter(company_id=cid, status=status), page=page, limit=limit)

    def company_stats(self, company_id: Any) -> dict[str, Any]:
        cid = parse_id(company_id, "company ID")
        return company_stats(scan(self._invoices, InvoiceFilter(company_id=cid)))

    def salary_register(self, invoice_id: Any) -> tuple[str, bytes]:
        """``(file_name, xlsx_bytes)`` for the invoice's payroll lines."""
        invoice = self.get_invoice(invoice_id)
        if not invoice.employees:
            raise ValidationError(f"Invoice {invoice.invoice_number} has no employee data")
        return f"{invoice.invoice_number}-salary.xlsx", build_salary_register(invoice.employees)

    # -------- Update / delete --------
    def update_invoice(
        self,
        invoice_id: Any,
        *,
        status: Any = None,
        payment_status: Any = None,
        bill_to: Optional[Mapping[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        """Change lifecycle fields. Financial figures are never recomputed."""
        invoice = self.get_invoice(invoice_id)

        new_status = parse_enum(InvoiceStatus, status, "status") if status is not None else None
        new_payment = (
            parse_enum(PaymentStatus, payment_status, "paymentStatus") if payment_status is not None else None
        )
        new_bill_to = self._merge_bill_to(invoice.bill_to, bill_to) if bill_to is not None else None
        new_notes = validate_notes(notes)

        payment_date = None
        if new_payment == PaymentStatus.PAID and invoice.payment_status != PaymentStatus.PAID:
            payment_date = self._clock()

        self._invoices.update_fields(
            invoice_id=invoice.invoice_id,
            status=new_status,
            payment_status=new_payment,
            payment_date=payment_date,
            bill_to=new_bill_to,
            notes=new_notes,
        )
        return self.get_invoice(invoice.invoice_id)

    def delete_invoice(self, invoice_id: Any) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        self._invoices.delete(invoice.invoice_id)
        logger.info("Deleted invoice %s", invoice.invoice_number)
        if self._documents:
            self._documents.discard(invoice)
        return invoice

    # -------- Validation --------
    @staticmethod
    def _merge_bill_to(current: BillTo, changes: Mapping[str, Any]) -> BillTo:
        if not isinstance(changes, Mapping):
            raise ValidationError("billTo must be an object")

        updated = current
        if "name" in changes:
            updated = replace(updated, name=require_length(str(changes["name"] or ""), "Bill-to name", min_len=2, max_len=100))
        if "address" in changes:
            updated = replace(updated, address=str(changes["address"] or "").strip())
        for key in ("gstNumber", "gst_number"):
            if key in changes:
                gst = str(changes[key] or "").strip().upper()
                updated = replace(updated, gst_number=require_gstin(gst) if gst else "")
        for key in ("contactInfo", "contact_info"):
            if key in changes:
                updated = replace(updated, contact_info=str(changes[key] or "").strip())
        return updated
