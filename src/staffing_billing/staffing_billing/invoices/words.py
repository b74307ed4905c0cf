"""Amount in words, Indian numbering (thousand, lakh, crore)."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from ..common.money import round_half_up

UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _below_hundred(n: int) -> str:
    if n < 10:
        return UNITS[n]
    if n < 20:
        return TEENS[n - 10]
    return f"{TENS[n // 10]} {UNITS[n % 10]}".strip()


def _below_thousand(n: int) -> str:
    if n < 100:
        return _below_hundred(n)
    return f"{UNITS[n // 100]} Hundred {_below_hundred(n % 100)}".strip()


def _spell(n: int) -> str:
    parts: list[str] = []
    if n >= CRORE:
        # Above 99 crore the crore count is itself spelled in Indian groups.
        parts.append(f"{_spell(n // CRORE)} Crore")
        n %= CRORE
    if n >= LAKH:
        parts.append(f"{_below_hundred(n // LAKH)} Lakh")
        n %= LAKH
    if n >= THOUSAND:
        parts.append(f"{_below_hundred(n // THOUSAND)} Thousand")
        n %= THOUSAND
    if n:
        parts.append(_below_thousand(n))
    return " ".join(parts)


def number_to_words(amount: Union[int, Decimal]) -> str:
    """``25500`` -> ``"TWENTY FIVE THOUSAND FIVE HUNDRED RUPEES ONLY"``."""
    n = int(round_half_up(Decimal(amount)))
    if n < 0:
        raise ValueError("amount cannot be negative")
    if n == 0:
        return "ZERO RUPEES ONLY"
    return f"{_spell(n)} Rupees Only".upper()
