from __future__ import annotations

import re
from typing import Iterable, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E")

GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$")


def require_length(value: str, field_name: str, *, min_len: int = 0, max_len: int) -> str:
    value = (value or "").strip()
    if not min_len <= len(value) <= max_len:
        if min_len:
            raise ValidationError(f"{field_name} must be between {min_len} and {max_len} characters")
        raise ValidationError(f"{field_name} cannot be more than {max_len} characters")
    return value


def require_gstin(value: str) -> str:
    value = (value or "").strip()
    if not GSTIN_PATTERN.match(value):
        raise ValidationError("Invalid GST number format")
    return value


def parse_id(value: object, field_name: str = "ID") -> int:
    """Parse a positive integer record id."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: {value}")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}: {value}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field_name}: {value}")
    return parsed


def parse_ids(values: Iterable[object], field_name: str = "ID") -> list[int]:
    """Parse a list of ids, reporting every bad one at once."""
    parsed: list[int] = []
    invalid: list[str] = []
    for value in values:
        try:
            parsed.append(parse_id(value, field_name))
        except ValidationError:
            invalid.append(str(value))
    if invalid:
        raise ValidationError(f"Invalid {field_name}s: {', '.join(invalid)}")
    return parsed


def parse_enum(enum_cls: Type[E], value: object, field_name: str) -> E:
    try:
        return enum_cls(str(value).strip().lower())  # type: ignore[call-arg]
    except ValueError:
        raise ValidationError(f"Invalid {field_name} value: {value}")
