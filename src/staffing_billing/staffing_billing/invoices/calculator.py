from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ..common.money import ZERO, quantize_money, round_half_up
from ..core.constants import CGST_RATE, ESIC_RATE, IGST_RATE, PF_RATE, SGST_RATE
from ..core.enums import GstPaidBy, TaxType
from ..payroll.model import ProcessedEmployee
from .model import AttendanceAggregate, BillDetails, InvoiceTotals, RateConfig, TaxBreakdown
from .words import number_to_words

HUNDRED = Decimal("100")


def tax_breakdown(total_before_tax: Decimal, tax_type: TaxType) -> TaxBreakdown:
    if tax_type == TaxType.IGST:
        return TaxBreakdown(igst=total_before_tax * IGST_RATE)
    return TaxBreakdown(cgst=total_before_tax * CGST_RATE, sgst=total_before_tax * SGST_RATE)


def grand_total(total_before_tax: Decimal, tax: TaxBreakdown, gst_paid_by: GstPaidBy) -> Decimal:
    """Amount owed. Under reverse charge the client remits GST, so it is left out."""
    if gst_paid_by == GstPaidBy.ASHAPURI:
        return round_half_up(total_before_tax + tax.total_tax)
    return round_half_up(total_before_tax)


class InvoiceTotalsCalculator:
    """Aggregate payroll lines into invoice totals.

    Pure: the same employees and rates always give the same result.
    Order matters: PF/ESIC/bonus are charged on regular + overtime wages,
    the subtotal is rounded, and only then is the service charge applied.
    """

    def calculate(self, employees: Sequence[ProcessedEmployee], rates: RateConfig) -> InvoiceTotals:
        total_regular_days = sum((e.regular_days for e in employees), ZERO)
        total_overtime_days = sum((e.overtime_days for e in employees), ZERO)

        base_total = total_regular_days * rates.per_day_rate
        overtime_amount = total_overtime_days * rates.per_day_rate * rates.overtime_rate

        statutory_base = base_total + overtime_amount
        pf = statutory_base * PF_RATE
        esic = statutory_base * ESIC_RATE
        bonus = statutory_base * (rates.bonus_rate / HUNDRED)

        sub_total = base_total + overtime_amount + pf + esic + bonus
        round_off_sub_total = round_half_up(sub_total)

        service_charge = round_off_sub_total * (rates.service_charge_rate / HUNDRED)
        total_before_tax = round_off_sub_total + service_charge

        tax = tax_breakdown(total_before_tax, rates.tax_type)
        total = grand_total(total_before_tax, tax, rates.gst_paid_by)

        bill = BillDetails(
            base_amount=quantize_money(base_total),
            service_charge=quantize_money(service_charge),
            pf_amount=quantize_money(pf),
            esic_amount=quantize_money(esic),
            bonus_amount=quantize_money(bonus),
            overtime_amount=quantize_money(overtime_amount),
            gst_amount=quantize_money(tax.total_tax),
            total_amount=quantize_money(total),
        )

        return InvoiceTotals(
            total_regular_days=total_regular_days,
            total_overtime_days=total_overtime_days,
            base_total=base_total,
            overtime_amount=overtime_amount,
            statutory_base=statutory_base,
            pf=pf,
            esic=esic,
            bonus=bonus,
            sub_total=sub_total,
            round_off_sub_total=round_off_sub_total,
            round_off_difference=quantize_money(round_off_sub_total - sub_total),
            service_charge=service_charge,
            total_before_tax=total_before_tax,
            tax=tax,
            grand_total=total,
            grand_total_in_words=number_to_words(total),
            bill_details=bill,
        )

    @staticmethod
    def aggregate(
        employees: Sequence[ProcessedEmployee],
        totals: InvoiceTotals,
        *,
        per_day_rate: Decimal,
        working_days: Decimal,
    ) -> AttendanceAggregate:
        return AttendanceAggregate(
            total_employees=len(employees),
            total_regular_days=totals.total_regular_days,
            total_overtime_days=totals.total_overtime_days,
            per_day_rate=per_day_rate,
            working_days=working_days,
        )

    number_to_words = staticmethod(number_to_words)
