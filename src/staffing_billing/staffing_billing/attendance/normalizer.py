from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from ..common.money import ZERO, to_decimal
from .model import AttendanceRecord, NormalizedAttendance

logger = logging.getLogger(__name__)

NAME_KEYS = ("name", "employee_name", "employeeName", "employee")
PRESENT_KEYS = ("presentDays", "present_day", "present_days", "present", "days_present")
TOTAL_KEYS = ("totalDays", "total_day", "total_days", "total", "working_days", "workingDays")
ABSENT_KEYS = ("absentDays", "absent_day", "absent_days", "absent")


def _first(row: Mapping[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


class AttendanceNormalizer:
    """Single boundary that resolves the varying attendance field names.

    Rows come from the AI extractor or a spreadsheet and may say
    ``present_day``/``presentDays``, ``total_day``/``totalDays``, or only give
    absent days. Missing numbers default to 0. Rows without a name or with
    ``total_days <= 0`` are dropped, never raised on.
    """

    def normalize_row(self, row: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        if not isinstance(row, Mapping):
            return None

        name = str(_first(row, NAME_KEYS) or "").strip()
        present = max(to_decimal(_first(row, PRESENT_KEYS)), ZERO)

        raw_total = _first(row, TOTAL_KEYS)
        if raw_total is not None:
            total = to_decimal(raw_total)
        else:
            absent = max(to_decimal(_first(row, ABSENT_KEYS)), ZERO)
            total = present + absent

        if not name or total <= 0:
            return None
        return AttendanceRecord(name=name, present_days=present, total_days=total)

    def normalize(self, rows: Iterable[Mapping[str, Any]]) -> NormalizedAttendance:
        records: list[AttendanceRecord] = []
        dropped = 0
        for row in rows or []:
            rec = self.normalize_row(row)
            if rec is None:
                dropped += 1
                continue
            records.append(rec)

        if dropped:
            logger.info("Dropped %d invalid attendance row(s), kept %d", dropped, len(records))
        return NormalizedAttendance(records=records, dropped=dropped)
