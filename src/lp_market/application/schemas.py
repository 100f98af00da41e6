"""Pydantic schemas for lp_market API responses.

Amounts are raw micro-unit ints plus a *_display string; price and
progress are exact ratios rendered as decimal strings (never floats).
"""

from pydantic import BaseModel

from src.lp_common.datetime_utils import to_utc_iso
from src.lp_common.units import format_micro, ratio_to_decimal
from src.lp_curve.domain.models import TradeQuote
from src.lp_market.domain.models import Market


class MarketDetail(BaseModel):
    id: str
    owner_address: str
    name: str
    symbol: str
    description: str
    token_contract_ref: str
    amm_contract_ref: str
    real_reserve: int
    real_reserve_display: str
    virtual_reserve: int
    token_reserve: int
    target_reserve: int
    price: str
    progress_pct: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            owner_address=m.owner_address,
            name=m.name,
            symbol=m.symbol,
            description=m.description,
            token_contract_ref=m.token_contract_ref,
            amm_contract_ref=m.amm_contract_ref,
            real_reserve=m.real_reserve,
            real_reserve_display=format_micro(m.real_reserve),
            virtual_reserve=m.virtual_reserve,
            token_reserve=m.token_reserve,
            target_reserve=m.target_reserve,
            price=str(ratio_to_decimal(m.price)),
            progress_pct=str(ratio_to_decimal(m.progress, places=2)),
            created_at=to_utc_iso(m.created_at),
            updated_at=to_utc_iso(m.updated_at),
        )


class MarketListResponse(BaseModel):
    items: list[MarketDetail]


class QuoteResponse(BaseModel):
    market_id: str
    side: str
    input_amount: int
    output_amount: int
    output_display: str
    fee_amount: int
    resulting_price: str

    @classmethod
    def from_quote(cls, market_id: str, side: str, q: TradeQuote) -> "QuoteResponse":
        return cls(
            market_id=market_id,
            side=side,
            input_amount=q.input_amount,
            output_amount=q.output_amount,
            output_display=format_micro(q.output_amount),
            fee_amount=q.fee_amount,
            resulting_price=str(ratio_to_decimal(q.resulting_price)),
        )


class TradeRequest(BaseModel):
    amount: int
