from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import PayBreakdown


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        *,
        regular_days: Decimal,
        overtime_days: Decimal,
        per_day_rate: Decimal,
        overtime_rate: Decimal,
    ) -> PayBreakdown:
        raise NotImplementedError
