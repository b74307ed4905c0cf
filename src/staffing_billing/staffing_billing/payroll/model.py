from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class DaySplit:
    regular_days: Decimal
    overtime_days: Decimal


@dataclass(frozen=True)
class PayBreakdown:
    regular_pay: Decimal
    overtime_pay: Decimal
    gross: Decimal
    epf: Decimal
    esic: Decimal
    net: Decimal


@dataclass(frozen=True)
class ProcessedEmployee:
    """Per-employee payroll line stored on an invoice.

    ``regular_days + overtime_days == present_days`` by construction.
    ``source_company``/``source_invoice`` are only set on merged invoices.
    """

    name: str
    present_days: Decimal
    regular_days: Decimal
    overtime_days: Decimal
    total_days: Decimal
    salary: Decimal
    source_company: Optional[str] = None
    source_invoice: Optional[str] = None


@dataclass(frozen=True)
class PayrollBatch:
    employees: list[ProcessedEmployee] = field(default_factory=list)
    working_days: Decimal = Decimal("0")
    overtime_threshold: Decimal = Decimal("0")
