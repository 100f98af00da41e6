"""TradeExecutor: one buy or sell against a market's bonding curve.

  1. quote on a fresh chain snapshot (rejects degenerate trades pre-submit)
  2. submit through the wallet
  3. block until confirmed
  4. re-read reserves from chain and persist those, not the quote

Step 4 re-reads ground truth because other traders' transactions may land
before ours. The Market record is only written after confirmation.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_chain.application.reader import CurveStateReader
from src.lp_chain.application.session import require_address
from src.lp_chain.domain import contracts
from src.lp_chain.domain.ports import (
    ChainAction,
    ChainError,
    ConfirmationProtocol,
    WalletProtocol,
)
from src.lp_common.datetime_utils import utc_now
from src.lp_common.enums import TradeSide
from src.lp_common.errors import InternalError, MarketNotFoundError, TradeFailedError
from src.lp_curve.domain.models import TradeQuote
from src.lp_curve.domain.pricing import quote_buy, quote_sell, validate_trade_amount
from src.lp_market.domain.models import Market
from src.lp_market.domain.repository import MarketRepositoryProtocol
from src.lp_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class TradeExecutor:
    def __init__(
        self,
        wallet: WalletProtocol,
        confirmations: ConfirmationProtocol,
        reader: CurveStateReader,
        repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._wallet = wallet
        self._confirmations = confirmations
        self._reader = reader
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def execute_buy(
        self,
        db: AsyncSession,
        market_id: str,
        base_amount_in: int,
        trader_address: str | None = None,
    ) -> Market:
        return await self._execute(db, market_id, TradeSide.BUY, base_amount_in, trader_address)

    async def execute_sell(
        self,
        db: AsyncSession,
        market_id: str,
        token_amount_in: int,
        trader_address: str | None = None,
    ) -> Market:
        return await self._execute(db, market_id, TradeSide.SELL, token_amount_in, trader_address)

    async def _execute(
        self,
        db: AsyncSession,
        market_id: str,
        side: TradeSide,
        amount: int,
        trader_address: str | None,
    ) -> Market:
        """trader_address, when given, must be the address the wallet signs as."""
        validate_trade_amount(amount)
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        await require_address(self._wallet, trader_address)

        state = await self._reader.fetch(market.amm_contract_ref)
        quote: TradeQuote
        action: ChainAction
        if side == TradeSide.BUY:
            quote = quote_buy(amount, state)
            action = contracts.buy_action(
                market.amm_contract_ref, market.token_contract_ref, amount
            )
        else:
            quote = quote_sell(amount, state)
            action = contracts.sell_action(
                market.amm_contract_ref, market.token_contract_ref, amount
            )

        try:
            tx_id = await self._wallet.sign_and_submit(action)
            confirmation = await self._confirmations.await_confirmation(tx_id)
        except ChainError as exc:
            raise TradeFailedError(market_id, str(exc)) from exc
        if not confirmation.confirmed:
            raise TradeFailedError(market_id, confirmation.cause or confirmation.status.value)

        fresh = await self._reader.fetch(market.amm_contract_ref)
        updated = market.with_curve(fresh, utc_now())
        try:
            await self._repo.save_market(db, updated)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.error("Market %s not saved after tx=%s: %s", market_id, tx_id, exc)
            raise InternalError(
                f"{side.value} {tx_id} confirmed but market {market_id} was not saved"
            ) from exc

        logger.info(
            "%s confirmed: market=%s tx=%s amount=%d quoted_out=%d real_reserve=%d->%d",
            side.value, market_id, tx_id, amount, quote.output_amount,
            market.real_reserve, updated.real_reserve,
        )
        return updated
