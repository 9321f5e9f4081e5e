"""Decimal helpers shared by pricing, proration and settlement."""

from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal, places: int = 2) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Two-decimal rendering used in receipt summaries."""
    return str(round_half_up(to_decimal(value), 2))


# Scale of stored balances and payment amounts (Numeric(16, 5)).
AMOUNT_PLACES = 5


def fits_amount_scale(value: Decimal, places: int = AMOUNT_PLACES) -> bool:
    value = to_decimal(value)
    return value == round_half_up(value, places)
