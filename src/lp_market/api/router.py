"""lp_market REST endpoints.

GET  /markets                             : list, optionally by owner
GET  /markets/{market_id}                 : persisted detail
POST /markets/{market_id}/refresh         : re-read reserves from chain
GET  /markets/{market_id}/quote/buy?amount= : preview, no state change
GET  /markets/{market_id}/quote/sell?amount= : preview, no state change
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_chain.api.dependencies import get_curve_reader
from src.lp_chain.application.reader import CurveStateReader
from src.lp_common.database import get_db_session
from src.lp_common.response import ApiResponse, success_response
from src.lp_market.application.schemas import MarketDetail
from src.lp_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])


def get_market_service(
    reader: Annotated[CurveStateReader, Depends(get_curve_reader)],
) -> MarketApplicationService:
    return MarketApplicationService(reader)


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    owner: str | None = Query(None, description="Filter by deployer address"),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await service.list_markets(db, owner, limit)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_market(db, market_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.post("/{market_id}/refresh")
async def refresh_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    market = await service.refresh_market(db, market_id)
    return success_response(
        MarketDetail.from_domain(market).model_dump(),
        getattr(request.state, "request_id", None),
    )


@router.get("/{market_id}/quote/buy")
async def preview_buy(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    amount: int = Query(..., description="Base micro-units in"),
) -> ApiResponse:
    result = await service.preview_buy(db, market_id, amount)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("/{market_id}/quote/sell")
async def preview_sell(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    amount: int = Query(..., description="Token micro-units in"),
) -> ApiResponse:
    result = await service.preview_sell(db, market_id, amount)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))
