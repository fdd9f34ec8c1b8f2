"""
Display rounding shared by the engines.

Python's round() uses banker's rounding; reported figures round half up.
"""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 2) -> float:
    """Round to `digits` decimals, halves away from zero"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_whole(value: float) -> int:
    """Round to the nearest whole number, halves up"""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
