"""Integer arithmetic utilities for micro-unit amounts.

All reserves, amounts and fees are int micro-units (6 decimals).
No float for amounts; display helpers only format.
"""

from decimal import Decimal, localcontext
from fractions import Fraction

MICRO = 1_000_000


def format_micro(amount: int) -> str:
    """Convert micro-units to display string: 1500000 -> '1.50', -2500000 -> '-2.50'."""
    if amount < 0:
        return f"-{format_micro(-amount)}"
    whole, frac = divmod(amount, MICRO)
    return f"{whole:,}.{frac // 10_000:02d}"


def calc_fee(amount: int, fee_rate_bps: int) -> int:
    """Floor-division fee: amount x fee_rate_bps // 10000."""
    return amount * fee_rate_bps // 10_000


def ratio_to_decimal(value: Fraction, places: int = 18) -> Decimal:
    """Exact non-negative ratio -> Decimal with `places` digits, floored."""
    with localcontext() as ctx:
        ctx.prec = 60
        scaled = value.numerator * 10**places // value.denominator
        return Decimal(scaled).scaleb(-places)
