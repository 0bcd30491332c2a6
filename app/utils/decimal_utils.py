# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to a 2-place money Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percentage_of(amount, percentage) -> Decimal:
    return to_decimal(to_decimal(amount) * Decimal(str(percentage)) / Decimal("100"))


def to_idr(amount) -> str:
    """Format an amount the way receipts show it, e.g. ``Rp 10.000``."""
    rounded = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return "Rp " + f"{int(rounded):,}".replace(",", ".")
