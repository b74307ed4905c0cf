from __future__ import annotations

from decimal import Decimal

from ...core.constants import EPF_EMPLOYEE_RATE, ESIC_EMPLOYEE_RATE
from ..model import PayBreakdown
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: day wages plus overtime, less 12% EPF and 0.75% ESIC."""

    def calculate(
        self,
        *,
        regular_days: Decimal,
        overtime_days: Decimal,
        per_day_rate: Decimal,
        overtime_rate: Decimal,
    ) -> PayBreakdown:
        regular_pay = regular_days * per_day_rate
        overtime_pay = overtime_days * per_day_rate * overtime_rate
        gross = regular_pay + overtime_pay
        epf = gross * EPF_EMPLOYEE_RATE
        esic = gross * ESIC_EMPLOYEE_RATE
        return PayBreakdown(
            regular_pay=regular_pay,
            overtime_pay=overtime_pay,
            gross=gross,
            epf=epf,
            esic=esic,
            net=gross - epf - esic,
        )
