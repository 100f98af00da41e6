"""Domain models for lp_curve: immutable value objects, integer reserves."""

from dataclasses import dataclass
from fractions import Fraction


@dataclass(frozen=True)
class CurveState:
    """Snapshot of one bonding-curve pool.

    virtual_reserve is fixed per market; it offsets real_reserve so the
    curve has a non-zero starting price before any base asset is raised.
    """

    market_ref: str
    real_reserve: int
    virtual_reserve: int
    token_reserve: int
    target_reserve: int

    def __post_init__(self) -> None:
        if self.real_reserve < 0 or self.token_reserve < 0 or self.virtual_reserve < 0:
            raise ValueError(f"Reserves must be non-negative: {self!r}")
        if self.target_reserve <= 0:
            raise ValueError(f"target_reserve must be positive, got {self.target_reserve}")
        if self.token_reserve > 0 and self.total_base <= 0:
            raise ValueError("real_reserve + virtual_reserve must be positive while tokens remain")

    @property
    def total_base(self) -> int:
        return self.real_reserve + self.virtual_reserve

    @property
    def k(self) -> int:
        return self.token_reserve * self.total_base

    @property
    def price(self) -> Fraction:
        return spot_price(self.total_base, self.token_reserve)

    @property
    def progress(self) -> Fraction:
        return funding_progress(self.real_reserve, self.target_reserve)


@dataclass(frozen=True)
class TradeQuote:
    """Ephemeral quote. output_amount is tokens for a buy, base for a sell."""

    input_amount: int
    output_amount: int
    fee_amount: int
    resulting_price: Fraction
    new_real_reserve: int
    new_token_reserve: int


def spot_price(total_base: int, token_reserve: int) -> Fraction:
    """Base units per token; 0 for an empty pool."""
    if token_reserve == 0:
        return Fraction(0)
    return Fraction(total_base, token_reserve)


def funding_progress(real_reserve: int, target_reserve: int) -> Fraction:
    """Percentage of target raised, clamped to [0, 100]."""
    pct = Fraction(max(real_reserve, 0) * 100, target_reserve)
    return min(Fraction(100), pct)
