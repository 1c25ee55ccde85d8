"""
Values -- Decimal coercion and money rounding helpers.

Responsibility:
    Single place where loosely-typed numbers (database floats, form strings,
    ints) become ``Decimal`` and where money is quantized.  Engines never do
    float arithmetic on hours or money.

Failure modes:
    - ValueError when a value cannot be interpreted as a finite decimal.
    - TypeError for booleans and other non-numeric types.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")

NumberLike = Decimal | int | float | str


def as_decimal(value: NumberLike, field_name: str = "value") -> Decimal:
    """Convert a number-like value to ``Decimal``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if isinstance(value, bool):
        raise TypeError(f"{field_name} must be numeric, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"{field_name} is not a number: {value!r}") from exc
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise TypeError(
            f"{field_name} must be Decimal, int, float or str, "
            f"got {type(value).__name__}"
        )
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return result


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Quantize a money amount with ROUND_HALF_UP."""
    return amount.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)
