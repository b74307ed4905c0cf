from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from ..common.money import ZERO


@dataclass(frozen=True)
class AttendanceRecord:
    """Canonical attendance of one employee for a billing period.

    ``present_days > total_days`` is tolerated: callers may pass inconsistent
    data and the numbers are used as given.
    """

    name: str
    present_days: Decimal
    total_days: Decimal

    @property
    def absent_days(self) -> Decimal:
        return max(self.total_days - self.present_days, ZERO)


@dataclass(frozen=True)
class NormalizedAttendance:
    records: list[AttendanceRecord] = field(default_factory=list)
    dropped: int = 0
