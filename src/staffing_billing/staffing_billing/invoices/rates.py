from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.money import to_decimal
from ..common.validators import parse_enum
from ..core.constants import (
    DEFAULT_BONUS_RATE,
    DEFAULT_OVERTIME_RATE,
    DEFAULT_PER_DAY_RATE,
    DEFAULT_SERVICE_CHARGE_RATE,
)
from ..core.enums import GstPaidBy, PaymentMethod, TaxType
from ..core.exceptions import ValidationError
from .model import RateConfig

_MISSING = object()


def _pick(payload: Mapping[str, Any], camel: str, snake: str) -> Any:
    for key in (camel, snake):
        value = payload.get(key, _MISSING)
        if value is not _MISSING and value is not None and value != "":
            return value
    return _MISSING


def _rate(payload: Mapping[str, Any], camel: str, snake: str, default: Decimal) -> Decimal:
    raw = _pick(payload, camel, snake)
    if raw is _MISSING:
        return default
    value = to_decimal(raw, default=Decimal("NaN"))
    if value.is_nan():
        raise ValidationError(f"{camel} must be a number")
    if value < 0:
        raise ValidationError(f"{camel} cannot be negative")
    return value


def resolve_rate_config(payload: Optional[Mapping[str, Any]] = None) -> RateConfig:
    """The one place billing defaults are injected and validated.

    Defaults: perDayRate 466, serviceChargeRate 7 (%), bonusRate 0 (%),
    overtimeRate 1.5 (multiplier), gstPaidBy principal-employer, taxType gst,
    paymentMethod paid-by-us.
    """
    payload = payload or {}

    per_day_rate = _rate(payload, "perDayRate", "per_day_rate", DEFAULT_PER_DAY_RATE)
    service_charge_rate = _rate(payload, "serviceChargeRate", "service_charge_rate", DEFAULT_SERVICE_CHARGE_RATE)
    bonus_rate = _rate(payload, "bonusRate", "bonus_rate", DEFAULT_BONUS_RATE)
    overtime_rate = _rate(payload, "overtimeRate", "overtime_rate", DEFAULT_OVERTIME_RATE)

    if service_charge_rate > 100:
        raise ValidationError("Service charge rate cannot exceed 100%")
    if overtime_rate < 1:
        raise ValidationError("Overtime rate must be at least 1")

    gst_paid_by = _pick(payload, "gstPaidBy", "gst_paid_by")
    tax_type = _pick(payload, "taxType", "tax_type")
    payment_method = _pick(payload, "paymentMethod", "payment_method")

    return RateConfig(
        per_day_rate=per_day_rate,
        service_charge_rate=service_charge_rate,
        bonus_rate=bonus_rate,
        overtime_rate=overtime_rate,
        gst_paid_by=GstPaidBy.PRINCIPAL_EMPLOYER if gst_paid_by is _MISSING else parse_enum(GstPaidBy, gst_paid_by, "gstPaidBy"),
        tax_type=TaxType.GST if tax_type is _MISSING else parse_enum(TaxType, tax_type, "taxType"),
        payment_method=(
            PaymentMethod.PAID_BY_US
            if payment_method is _MISSING
            else parse_enum(PaymentMethod, payment_method, "paymentMethod")
        ),
    )
