"""Constant-product bonding-curve quotes.

k = token_reserve * (real_reserve + virtual_reserve)

Pure integer arithmetic; Python ints are arbitrary precision so k never
overflows. Rounding always favors the pool:
  - buy: new token reserve is floored, so tokens_out rounds down
  - sell: new base total is floored and one extra unit is withheld
"""

from src.lp_common.errors import (
    DegenerateTradeError,
    InsufficientLiquidityError,
    ValidationError,
)
from src.lp_common.units import calc_fee
from src.lp_curve.domain.constants import FEE_RATE_BPS
from src.lp_curve.domain.models import CurveState, TradeQuote, spot_price

# Withheld from every sell to match the contract's rounding margin.
SELL_ROUNDING_MARGIN = 1


def validate_trade_amount(amount: int, field: str = "amount") -> None:
    """Reject non-positive or non-integer amounts before any external call."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError(f"{field} must be a positive integer, got {amount!r}")


def quote_buy(
    base_amount_in: int, state: CurveState, fee_rate_bps: int = FEE_RATE_BPS
) -> TradeQuote:
    """Tokens received for base_amount_in. Fee is taken from the input."""
    validate_trade_amount(base_amount_in, "base_amount_in")
    if state.token_reserve <= 0:
        raise InsufficientLiquidityError(f"pool {state.market_ref} has no tokens left")

    fee = calc_fee(base_amount_in, fee_rate_bps)
    net_in = base_amount_in - fee

    total_base_before = state.total_base
    k = state.token_reserve * total_base_before
    total_base_after = total_base_before + net_in
    new_token_reserve = k // total_base_after

    if new_token_reserve == 0:
        raise InsufficientLiquidityError(
            f"buy of {base_amount_in} would drain pool {state.market_ref}"
        )

    tokens_out = state.token_reserve - new_token_reserve
    return TradeQuote(
        input_amount=base_amount_in,
        output_amount=tokens_out,
        fee_amount=fee,
        resulting_price=spot_price(total_base_after, new_token_reserve),
        new_real_reserve=state.real_reserve + net_in,
        new_token_reserve=new_token_reserve,
    )


def quote_sell(
    token_amount_in: int, state: CurveState, fee_rate_bps: int = FEE_RATE_BPS
) -> TradeQuote:
    """Base received for token_amount_in. Fee is taken from the gross output."""
    validate_trade_amount(token_amount_in, "token_amount_in")

    total_base_before = state.total_base
    k = state.token_reserve * total_base_before
    new_token_reserve = state.token_reserve + token_amount_in
    new_total_base = k // new_token_reserve
    gross_out = total_base_before - new_total_base - SELL_ROUNDING_MARGIN

    if gross_out <= 0:
        raise DegenerateTradeError(
            f"selling {token_amount_in} into {state.market_ref} yields no base asset"
        )
    if gross_out > state.real_reserve:
        # Virtual reserve is never paid out; only raised funds can leave the pool.
        raise InsufficientLiquidityError(
            f"sell of {token_amount_in} exceeds raised reserve of {state.market_ref}"
        )

    fee = calc_fee(gross_out, fee_rate_bps)
    return TradeQuote(
        input_amount=token_amount_in,
        output_amount=gross_out - fee,
        fee_amount=fee,
        resulting_price=spot_price(new_total_base, new_token_reserve),
        new_real_reserve=state.real_reserve - gross_out,
        new_token_reserve=new_token_reserve,
    )
