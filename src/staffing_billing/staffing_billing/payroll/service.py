from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..common.money import quantize_money
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollBatch, ProcessedEmployee
from .overtime import OvertimeAllocator


class PayrollService:
    def __init__(
        self,
        *,
        allocator: Optional[OvertimeAllocator] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._allocator = allocator or OvertimeAllocator()
        self._calculator = calculator or StandardPayrollCalculator()

    def process(
        self,
        records: Sequence[AttendanceRecord],
        *,
        per_day_rate: Decimal,
        overtime_rate: Decimal,
    ) -> PayrollBatch:
        """Turn a batch of attendance records into payroll lines.

        The working-day figure is the batch maximum, so one employee with
        missing working-day data does not shift everyone's threshold.
        """
        working_days = self._allocator.working_days_in_month(records)
        threshold = self._allocator.threshold_for(working_days)

        employees: list[ProcessedEmployee] = []
        for rec in records:
            split = self._allocator.allocate(rec.present_days, threshold)
            pay = self._calculator.calculate(
                regular_days=split.regular_days,
                overtime_days=split.overtime_days,
                per_day_rate=per_day_rate,
                overtime_rate=overtime_rate,
            )
            employees.append(
                ProcessedEmployee(
                    name=rec.name,
                    present_days=rec.present_days,
                    regular_days=split.regular_days,
                    overtime_days=split.overtime_days,
                    total_days=rec.total_days,
                    salary=quantize_money(pay.net),
                )
            )

        return PayrollBatch(employees=employees, working_days=working_days, overtime_threshold=threshold)
