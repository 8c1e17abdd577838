"""Money helpers: amounts travel as ``Decimal`` and are computed in integer cents."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from splitmint.services.errors import InvalidArgumentError

Numeric = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
HUNDRED = Decimal(100)
ZERO = Decimal("0.00")


def to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"not an amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidArgumentError(f"not an amount: {value!r}") from exc
    if not result.is_finite():
        raise InvalidArgumentError(f"not a finite amount: {value!r}")
    return result


def parse_decimal(value: object, default: Decimal = Decimal(0)) -> Decimal:
    """Lenient variant of :func:`to_decimal`: blanks and garbage become ``default``."""
    if value is None or value == "":
        return default
    try:
        return to_decimal(value)  # type: ignore[arg-type]
    except InvalidArgumentError:
        return default


def round_half_away(value: Decimal) -> Decimal:
    # ROUND_HALF_UP in the decimal module rounds ties away from zero
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def floor_to_cent(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_FLOOR)


def to_cents(value: Numeric) -> int:
    return int(round_half_away(to_decimal(value)) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / HUNDRED).quantize(CENT)
