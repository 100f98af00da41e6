"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.lp_chain.infrastructure.http_client import close_http_client, get_http_client
from src.lp_common.database import check_database, engine
from src.lp_common.errors import AppError, DeploymentFailedError
from src.lp_common.redis_client import check_redis, close_redis
from src.lp_common.response import error_response
from src.lp_deploy.api.router import router as deploy_router
from src.lp_deploy.application.schemas import DeploymentOut
from src.lp_gateway.middleware.request_log import RequestLogMiddleware
from src.lp_market.api.router import router as market_router
from src.lp_trade.api.router import router as trade_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when it backs workflow locks). Shutdown: dispose."""
    # Startup
    await check_database()
    if settings.WORKFLOW_LOCK_BACKEND == "redis":
        await check_redis()
    get_http_client()
    yield
    # Shutdown
    await close_http_client()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    data: Any = None
    if isinstance(exc, DeploymentFailedError):
        # Resumable checkpoint for the caller; None if nothing was confirmed
        data = {
            "step": exc.step,
            "cause": exc.cause,
            "record": DeploymentOut.from_domain(exc.record).model_dump() if exc.record else None,
        }
    resp = error_response(exc.code, exc.message, data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(deploy_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(trade_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
