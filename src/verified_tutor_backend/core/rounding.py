'''
The single rounding policy for every displayed statistic.
'''
from decimal import Decimal, ROUND_HALF_UP

ONE_DECIMAL = Decimal('0.1')


def round_one_decimal(value: Decimal | float | int) -> float:
    """
    Rounds to one decimal place, halves away from zero (1.25 -> 1.3, -1.25 -> -1.3).

    Floats go through their shortest repr so that 1.25 is treated as the
    decimal 1.25 and not as its binary approximation.
    """
    if not isinstance(value, Decimal):
        value = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    return float(value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))
