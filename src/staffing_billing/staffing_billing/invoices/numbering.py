from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from .repository import SequenceRepository

logger = logging.getLogger(__name__)


class InvoiceSeries(str, Enum):
    """Independently numbered invoice series."""

    ORDINARY = "INV"
    MERGED = "MINV"

    @property
    def counter(self) -> str:
        return "merged-invoice" if self is InvoiceSeries.MERGED else "invoice"


def format_invoice_number(series: InvoiceSeries, year: int, seq: int) -> str:
    """``INV-2026-007``; sequences past 999 simply grow wider."""
    return f"{series.value}-{year}-{seq:03d}"


def sequence_name(series: InvoiceSeries, year: int) -> str:
    return f"{series.counter}:{year}"


class InvoiceNumberGenerator:
    """Year-scoped invoice numbers backed by an atomic counter.

    Counting existing invoices at creation time races under concurrent
    creation; the counter row is incremented atomically instead, so two
    callers can never receive the same number.
    """

    def __init__(self, sequences: SequenceRepository, *, clock: Optional[Callable[[], datetime]] = None):
        self._sequences = sequences
        self._clock = clock or now_local

    def next_number(self, series: InvoiceSeries = InvoiceSeries.ORDINARY, *, year: Optional[int] = None) -> str:
        year = year or self._clock().year
        seq = self._sequences.next_value(sequence_name(series, year))
        number = format_invoice_number(series, year, seq)
        logger.debug("Allocated invoice number %s", number)
        return number
