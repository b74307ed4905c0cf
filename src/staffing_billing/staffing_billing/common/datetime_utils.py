from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional


def parse_iso_date(value: str) -> date:
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, datetime.min.time())


def day_range(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """``[start 00:00, end + 1 day 00:00)``; ``end`` is an inclusive calendar day."""
    return (
        start_of_day(start) if start else None,
        start_of_day(end) + timedelta(days=1) if end else None,
    )


def now_local() -> datetime:
    """Injected as the default clock; tests pass a fixed one instead."""
    return datetime.now()
