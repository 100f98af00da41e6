"""MarketApplicationService: market reads, quote previews and refresh.

Previews always quote against a fresh CurveStateReader snapshot, never the
persisted reserves. refresh_market is the only write and commits itself.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_chain.application.reader import CurveStateReader
from src.lp_common.datetime_utils import utc_now
from src.lp_common.enums import TradeSide
from src.lp_common.errors import InternalError, MarketNotFoundError
from src.lp_curve.domain.pricing import quote_buy, quote_sell, validate_trade_amount
from src.lp_market.application.schemas import (
    MarketDetail,
    MarketListResponse,
    QuoteResponse,
)
from src.lp_market.domain.models import Market
from src.lp_market.domain.repository import MarketRepositoryProtocol
from src.lp_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(
        self,
        reader: CurveStateReader,
        repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._reader = reader
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def load_market(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def list_markets(
        self, db: AsyncSession, owner_address: str | None, limit: int
    ) -> MarketListResponse:
        markets = await self._repo.list_markets(db, owner_address, limit)
        return MarketListResponse(items=[MarketDetail.from_domain(m) for m in markets])

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        return MarketDetail.from_domain(await self.load_market(db, market_id))

    async def preview_buy(
        self, db: AsyncSession, market_id: str, base_amount_in: int
    ) -> QuoteResponse:
        validate_trade_amount(base_amount_in, "base_amount_in")
        market = await self.load_market(db, market_id)
        state = await self._reader.fetch(market.amm_contract_ref)
        return QuoteResponse.from_quote(
            market_id, TradeSide.BUY.value, quote_buy(base_amount_in, state)
        )

    async def preview_sell(
        self, db: AsyncSession, market_id: str, token_amount_in: int
    ) -> QuoteResponse:
        validate_trade_amount(token_amount_in, "token_amount_in")
        market = await self.load_market(db, market_id)
        state = await self._reader.fetch(market.amm_contract_ref)
        return QuoteResponse.from_quote(
            market_id, TradeSide.SELL.value, quote_sell(token_amount_in, state)
        )

    async def refresh_market(self, db: AsyncSession, market_id: str) -> Market:
        """Re-read reserves from chain and persist them. Nothing is written on failure."""
        market = await self.load_market(db, market_id)
        state = await self._reader.fetch(market.amm_contract_ref)
        refreshed = market.with_curve(state, utc_now())
        try:
            await self._repo.save_market(db, refreshed)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.error("Market %s not refreshed: %s", market_id, exc)
            raise InternalError(f"Market {market_id} was not saved") from exc
        logger.info(
            "Market refreshed: id=%s real=%d tokens=%d",
            market_id, refreshed.real_reserve, refreshed.token_reserve,
        )
        return refreshed
