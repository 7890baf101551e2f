# practice_comp/utils/decimal_helpers.py

from decimal import Decimal, ROUND_HALF_UP

# Standard quantization unit for money
TWO_PLACES = Decimal('0.01')
WHOLE = Decimal('1')


def round_half_up(value: float, places: int = 0) -> float:
    """Round a float half away from zero (unlike the built-in banker's rounding)."""
    unit = WHOLE if places == 0 else Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(unit, rounding=ROUND_HALF_UP))


def to_money(value: float) -> float:
    """Quantize a dollar amount to cents with ROUND_HALF_UP rounding.

    Only used at display boundaries; intermediate results stay unrounded.
    """
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
