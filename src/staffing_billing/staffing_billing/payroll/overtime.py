from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..attendance.model import AttendanceRecord
from ..common.money import ZERO
from ..core.constants import OVERTIME_THRESHOLD_OFFSET
from .model import DaySplit


class OvertimeAllocator:
    """Split present days into regular and overtime days.

    threshold = working days in month - 4. Days above the threshold are
    overtime. A threshold at or below zero (e.g. no working-day data) makes
    every present day overtime.
    """

    @staticmethod
    def working_days_in_month(records: Iterable[AttendanceRecord]) -> Decimal:
        return max((r.total_days for r in records), default=ZERO)

    @staticmethod
    def threshold_for(working_days: Decimal) -> Decimal:
        return working_days - OVERTIME_THRESHOLD_OFFSET

    def allocate(self, present_days: Decimal, threshold: Decimal) -> DaySplit:
        limit = max(threshold, ZERO)
        if present_days > limit:
            return DaySplit(regular_days=limit, overtime_days=present_days - limit)
        return DaySplit(regular_days=present_days, overtime_days=ZERO)
