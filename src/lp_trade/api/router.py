"""lp_trade REST endpoints.

POST /markets/{market_id}/buy  : body {amount}: base micro-units in
POST /markets/{market_id}/sell : body {amount}: token micro-units in

Both block until the trade is confirmed and return the refreshed market.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_chain.api.dependencies import (
    get_confirmation_source,
    get_curve_reader,
    get_wallet,
)
from src.lp_chain.application.reader import CurveStateReader
from src.lp_chain.domain.ports import ConfirmationProtocol, WalletProtocol
from src.lp_common.database import get_db_session
from src.lp_common.response import ApiResponse, success_response
from src.lp_gateway.auth.dependencies import get_current_address
from src.lp_market.application.schemas import MarketDetail, TradeRequest
from src.lp_trade.application.executor import TradeExecutor

router = APIRouter(prefix="/markets", tags=["trades"])


def get_trade_executor(
    wallet: Annotated[WalletProtocol, Depends(get_wallet)],
    confirmations: Annotated[ConfirmationProtocol, Depends(get_confirmation_source)],
    reader: Annotated[CurveStateReader, Depends(get_curve_reader)],
) -> TradeExecutor:
    return TradeExecutor(wallet, confirmations, reader)


@router.post("/{market_id}/buy")
async def execute_buy(
    market_id: str,
    body: TradeRequest,
    request: Request,
    trader: Annotated[str, Depends(get_current_address)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    executor: Annotated[TradeExecutor, Depends(get_trade_executor)],
) -> ApiResponse:
    market = await executor.execute_buy(db, market_id, body.amount, trader)
    return success_response(
        MarketDetail.from_domain(market).model_dump(),
        getattr(request.state, "request_id", None),
    )


@router.post("/{market_id}/sell")
async def execute_sell(
    market_id: str,
    body: TradeRequest,
    request: Request,
    trader: Annotated[str, Depends(get_current_address)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    executor: Annotated[TradeExecutor, Depends(get_trade_executor)],
) -> ApiResponse:
    market = await executor.execute_sell(db, market_id, body.amount, trader)
    return success_response(
        MarketDetail.from_domain(market).model_dump(),
        getattr(request.state, "request_id", None),
    )
