"""
Display Formatting
==================
Currency, number and percentage rendering for estimator outputs.
"""

from decimal import ROUND_HALF_UP, Decimal

_WHOLE = Decimal("1")
_TENTH = Decimal("0.1")


def _as_decimal(value: Decimal | int | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_number(value: Decimal | int | float) -> str:
    """Round to a whole number with thousands separators, e.g. ``1,260,000``."""
    rounded = _as_decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP)
    return f"{int(rounded):,}"


def format_currency(value: Decimal | int | float) -> str:
    """Whole US dollars, e.g. ``$13,800`` or ``-$5,200``."""
    rounded = int(_as_decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_percent(value: Decimal | int | float) -> str:
    """One decimal place, e.g. ``12.5%``."""
    rounded = _as_decimal(value).quantize(_TENTH, rounding=ROUND_HALF_UP)
    return f"{rounded}%"
