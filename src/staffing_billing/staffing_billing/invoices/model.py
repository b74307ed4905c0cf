from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import FileType, GstPaidBy, InvoiceStatus, PaymentMethod, PaymentStatus, TaxType
from ..payroll.model import ProcessedEmployee


@dataclass(frozen=True)
class RateConfig:
    """Resolved billing rates; build with ``invoices.rates.resolve_rate_config``."""

    per_day_rate: Decimal
    service_charge_rate: Decimal
    bonus_rate: Decimal
    overtime_rate: Decimal
    gst_paid_by: GstPaidBy = GstPaidBy.PRINCIPAL_EMPLOYER
    tax_type: TaxType = TaxType.GST
    payment_method: PaymentMethod = PaymentMethod.PAID_BY_US


@dataclass(frozen=True)
class BillDetails:
    base_amount: Decimal = ZERO
    service_charge: Decimal = ZERO
    pf_amount: Decimal = ZERO
    esic_amount: Decimal = ZERO
    bonus_amount: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    gst_amount: Decimal = ZERO
    total_amount: Decimal = ZERO

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


@dataclass(frozen=True)
class AttendanceAggregate:
    """Invoice-level attendance figures.

    ``total_regular_days`` is the sum of *regular* (non-overtime) days; it is
    exposed as ``totalPresentDays`` on the wire for compatibility.
    """

    total_employees: int = 0
    total_regular_days: Decimal = ZERO
    total_overtime_days: Decimal = ZERO
    per_day_rate: Decimal = ZERO
    working_days: Decimal = ZERO


@dataclass(frozen=True)
class TaxBreakdown:
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class InvoiceTotals:
    """Every intermediate figure of an invoice calculation (unrounded)."""

    total_regular_days: Decimal
    total_overtime_days: Decimal
    base_total: Decimal
    overtime_amount: Decimal
    statutory_base: Decimal
    pf: Decimal
    esic: Decimal
    bonus: Decimal
    sub_total: Decimal
    round_off_sub_total: Decimal
    round_off_difference: Decimal
    service_charge: Decimal
    total_before_tax: Decimal
    tax: TaxBreakdown
    grand_total: Decimal
    grand_total_in_words: str
    bill_details: BillDetails


@dataclass(frozen=True)
class BillTo:
    name: str = ""
    address: str = ""
    gst_number: str = ""
    contact_info: str = ""


@dataclass(frozen=True)
class CompanyRef:
    company_id: int
    name: str = ""
    gst_number: Optional[str] = None


@dataclass(frozen=True)
class InvoiceFile:
    file_name: str
    file_type: FileType = FileType.PDF
    file_url: str = ""
    storage_id: Optional[str] = None
    file_size: Optional[int] = None


@dataclass(frozen=True)
class NewInvoice:
    invoice_number: str
    company_id: int
    file: InvoiceFile
    rates: RateConfig
    bill_details: BillDetails
    attendance: AttendanceAggregate
    employees: list[ProcessedEmployee]
    due_date: date
    bill_to: BillTo = BillTo()
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None
    is_merged: bool = False
    source_invoice_ids: tuple[int, ...] = ()
    merged_company_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class Invoice:
    """Persisted invoice. Financial fields are fixed at creation."""

    invoice_id: int
    invoice_number: str
    company: CompanyRef
    file: InvoiceFile
    rates: RateConfig
    bill_details: BillDetails
    attendance: AttendanceAggregate
    employees: list[ProcessedEmployee]
    due_date: Optional[date]
    created_at: datetime
    bill_to: BillTo = BillTo()
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None
    is_merged: bool = False
    source_invoice_ids: tuple[int, ...] = ()
    merged_company_ids: tuple[int, ...] = ()

    @property
    def company_id(self) -> int:
        return self.company.company_id


@dataclass(frozen=True)
class InvoiceFilter:
    company_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    payment_status: Optional[PaymentStatus] = None
    is_merged: Optional[bool] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    exclude_cancelled: bool = False


@dataclass(frozen=True)
class Page:
    items: list[Invoice] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
