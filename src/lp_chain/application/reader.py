"""CurveStateReader: authoritative on-chain reserves for a market.

Never caches: every fetch re-queries the chain so quotes are computed
against current state. Safe to call concurrently (read-only snapshot).
"""

import logging

from src.lp_chain.domain.ports import ChainError, ChainStateProtocol, MarketRefNotFound
from src.lp_common.errors import MarketUnavailableError
from src.lp_curve.domain.models import CurveState

logger = logging.getLogger(__name__)


class CurveStateReader:
    def __init__(self, chain_state: ChainStateProtocol) -> None:
        self._chain_state = chain_state

    async def fetch(self, market_ref: str) -> CurveState:
        try:
            reply = await self._chain_state.query_market_reserves(market_ref)
        except MarketRefNotFound as exc:
            raise MarketUnavailableError(market_ref, "AMM artifact not found") from exc
        except ChainError as exc:
            logger.warning("Reserve query failed: ref=%s err=%s", market_ref, exc)
            raise MarketUnavailableError(market_ref, str(exc)) from exc

        try:
            return CurveState(
                market_ref=market_ref,
                real_reserve=reply.real_reserve,
                virtual_reserve=reply.virtual_reserve,
                token_reserve=reply.token_reserve,
                target_reserve=reply.target_reserve,
            )
        except ValueError as exc:
            raise MarketUnavailableError(market_ref, f"inconsistent reserves: {exc}") from exc
