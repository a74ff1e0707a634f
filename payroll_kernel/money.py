"""
Money -- Decimal helpers for cent-exact payroll arithmetic.

Responsibility:
    Converts boundary values to Decimal and quantizes emitted amounts to
    two fractional digits.

Architecture position:
    Kernel -- pure functional core, zero I/O. Imported by config and
    engines.

Invariants enforced:
    - Amounts are Decimal, never float. A float at the boundary raises
      FloatAmountError rather than being silently converted.
    - Emitted money uses ROUND_HALF_UP to 0.01. Callers round once, at the
      point a field is emitted, and never mid-pipeline.

Failure modes:
    - FloatAmountError on float input.
    - InvalidAmountError (a ValueError) on strings that are not valid decimals.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payroll_kernel.exceptions import FloatAmountError, InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | str | None, field: str = "amount") -> Decimal:
    """
    Convert a boundary value to Decimal.

    Preconditions:
        - value is Decimal, int, str or None (None means zero).
    Postconditions:
        - Returns a Decimal with the exact value supplied.
    Raises:
        FloatAmountError: if value is a float.
        InvalidAmountError: if a string cannot be parsed, or value is a bool.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidAmountError(field, value)
    if isinstance(value, float):
        raise FloatAmountError(field, value)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidAmountError(field, value) from e


def round_money(amount: Decimal) -> Decimal:
    """Quantize to cents with ROUND_HALF_UP."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator as a percentage rounded to 2dp; 0 when denominator is 0."""
    if denominator == ZERO:
        return ZERO.quantize(CENT)
    return round_money(numerator / denominator * HUNDRED)


def money_str(amount: Decimal) -> str:
    """Two-decimal string form used in serialized results and logs."""
    return str(round_money(amount))
