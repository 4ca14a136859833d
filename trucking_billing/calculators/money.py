"""Currency rounding helpers.

All amounts crossing the engine's interfaces are Decimals rounded to
cents with ROUND_HALF_UP, the rounding invoices are printed with.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

# Largest amount a single job may be priced at; anything above is bad data
MAX_JOB_AMOUNT = Decimal("1000000000.00")


def round_amount(value: Union[Decimal, int]) -> Decimal:
    """Round a monetary value to 2 decimal places (half up).

    Example:
        >>> round_amount(Decimal("10.005"))
        Decimal('10.01')
        >>> round_amount(0)
        Decimal('0.00')
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_to_rate(percent: Decimal) -> Decimal:
    """Convert a 0-100 percentage into a 0-1 rate."""
    return Decimal(percent) / HUNDRED
