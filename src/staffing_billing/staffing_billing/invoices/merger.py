from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import date
from typing import Hashable, Iterable, Optional, Sequence, TypeVar

from ..common.money import ZERO
from ..core.enums import FileType, InvoiceStatus
from ..core.exceptions import ValidationError
from .model import AttendanceAggregate, BillDetails, BillTo, Invoice, InvoiceFile, NewInvoice, RateConfig

T = TypeVar("T", bound=Hashable)

MIN_SOURCES = 2


def majority_vote(values: Iterable[T]) -> T:
    """Most common value; ties go to the value seen first."""
    return Counter(values).most_common(1)[0][0]


def unique(values: Iterable[T]) -> list[T]:
    return list(dict.fromkeys(values))


class InvoiceMerger:
    """Combine non-merged invoices into one consolidated invoice.

    Bill amounts are summed field by field, never re-derived from employee
    data, so the merged totals equal the sum of the sources exactly.
    """

    @staticmethod
    def check_sources(sources: Sequence[Invoice]) -> None:
        if len(sources) < MIN_SOURCES:
            raise ValidationError("At least 2 invoice IDs are required for merging")

        already_merged = [s.invoice_number for s in sources if s.is_merged]
        if already_merged:
            raise ValidationError(f"Cannot merge already merged invoices: {', '.join(already_merged)}")

        cancelled = [s.invoice_number for s in sources if s.status == InvoiceStatus.CANCELLED]
        if cancelled:
            raise ValidationError(f"Cannot merge cancelled invoices: {', '.join(cancelled)}")

    @staticmethod
    def sum_bill_details(sources: Sequence[Invoice]) -> BillDetails:
        return BillDetails(
            **{
                name: sum((getattr(s.bill_details, name) for s in sources), ZERO)
                for name in BillDetails.field_names()
            }
        )

    @staticmethod
    def combine_attendance(sources: Sequence[Invoice]) -> AttendanceAggregate:
        return AttendanceAggregate(
            total_employees=sum(s.attendance.total_employees for s in sources),
            total_regular_days=sum((s.attendance.total_regular_days for s in sources), ZERO),
            total_overtime_days=sum((s.attendance.total_overtime_days for s in sources), ZERO),
            per_day_rate=max((s.attendance.per_day_rate for s in sources), default=ZERO),
            working_days=max((s.attendance.working_days for s in sources), default=ZERO),
        )

    @staticmethod
    def combine_rates(sources: Sequence[Invoice]) -> RateConfig:
        return RateConfig(
            per_day_rate=max(s.attendance.per_day_rate for s in sources),
            service_charge_rate=max(s.rates.service_charge_rate for s in sources),
            bonus_rate=max(s.rates.bonus_rate for s in sources),
            overtime_rate=max(s.rates.overtime_rate for s in sources),
            gst_paid_by=majority_vote(s.rates.gst_paid_by for s in sources),
            tax_type=majority_vote(s.rates.tax_type for s in sources),
            payment_method=majority_vote(s.rates.payment_method for s in sources),
        )

    def merge(
        self,
        sources: Sequence[Invoice],
        *,
        invoice_number: str,
        due_date: date,
        notes: Optional[str] = None,
    ) -> NewInvoice:
        self.check_sources(sources)

        company_ids = unique(s.company_id for s in sources)
        company_names = unique(s.company.name for s in sources)

        employees = [
            replace(e, source_company=s.company.name, source_invoice=s.invoice_number)
            for s in sources
            for e in s.employees
        ]

        bill_to = BillTo(
            name=" + ".join(company_names),
            address="; ".join(s.bill_to.address for s in sources if s.bill_to.address),
            gst_number=", ".join(
                g for g in (s.bill_to.gst_number or s.company.gst_number for s in sources) if g
            ),
        )

        source_numbers = ", ".join(s.invoice_number for s in sources)
        return NewInvoice(
            invoice_number=invoice_number,
            company_id=sources[0].company_id,
            file=InvoiceFile(
                file_name=f"{invoice_number}.pdf",
                file_type=FileType.PDF,
            ),
            rates=self.combine_rates(sources),
            bill_details=self.sum_bill_details(sources),
            attendance=self.combine_attendance(sources),
            employees=employees,
            due_date=due_date,
            bill_to=bill_to,
            notes=notes or f"Merged invoice from: {source_numbers}",
            is_merged=True,
            source_invoice_ids=tuple(s.invoice_id for s in sources),
            merged_company_ids=tuple(company_ids),
        )
