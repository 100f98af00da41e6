"""lp_deploy REST endpoints.

POST /deployments                      : fresh deployment, runs to completion
GET  /deployments                      : caller's resumable deployments
POST /deployments/{deployment_id}/resume : continue from last checkpoint

A failed step answers with the DeploymentFailedError envelope whose data
holds the resumable checkpoint (see main.app_error_handler).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lp_chain.api.dependencies import get_confirmation_source, get_wallet
from src.lp_chain.domain.ports import ConfirmationProtocol, WalletProtocol
from src.lp_common.database import get_db_session
from src.lp_common.redis_client import get_redis
from src.lp_common.response import ApiResponse, success_response
from src.lp_deploy.application.orchestrator import DeploymentOrchestrator
from src.lp_deploy.application.schemas import (
    DeploymentListResponse,
    DeploymentOut,
    DeployRequest,
)
from src.lp_deploy.infrastructure.workflow_lock import (
    InMemoryWorkflowLock,
    RedisWorkflowLock,
    WorkflowLockProtocol,
)
from src.lp_gateway.auth.dependencies import get_current_address
from src.lp_market.application.schemas import MarketDetail

router = APIRouter(prefix="/deployments", tags=["deployments"])

# Process-wide: every request must see the same in-flight set.
_memory_lock = InMemoryWorkflowLock()


async def get_workflow_lock() -> WorkflowLockProtocol:
    if settings.WORKFLOW_LOCK_BACKEND == "redis":
        return RedisWorkflowLock(await get_redis(), settings.WORKFLOW_LOCK_TTL_S)
    return _memory_lock


def get_orchestrator(
    wallet: Annotated[WalletProtocol, Depends(get_wallet)],
    confirmations: Annotated[ConfirmationProtocol, Depends(get_confirmation_source)],
    lock: Annotated[WorkflowLockProtocol, Depends(get_workflow_lock)],
) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(wallet, confirmations, lock)


@router.post("")
async def deploy_new_market(
    body: DeployRequest,
    request: Request,
    owner: Annotated[str, Depends(get_current_address)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    orchestrator: Annotated[DeploymentOrchestrator, Depends(get_orchestrator)],
) -> ApiResponse:
    record = await orchestrator.deploy_new_market(
        db, owner, body.name, body.symbol, body.description
    )
    return success_response(
        DeploymentOut.from_domain(record).model_dump(),
        getattr(request.state, "request_id", None),
    )


@router.get("")
async def list_resumable_deployments(
    request: Request,
    owner: Annotated[str, Depends(get_current_address)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    orchestrator: Annotated[DeploymentOrchestrator, Depends(get_orchestrator)],
) -> ApiResponse:
    records = await orchestrator.list_resumable_deployments(db, owner)
    result = DeploymentListResponse(items=[DeploymentOut.from_domain(r) for r in records])
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.post("/{deployment_id}/resume")
async def resume_deployment(
    deployment_id: str,
    request: Request,
    owner: Annotated[str, Depends(get_current_address)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    orchestrator: Annotated[DeploymentOrchestrator, Depends(get_orchestrator)],
) -> ApiResponse:
    record = await orchestrator.get_resumable_deployment(db, owner, deployment_id)
    market = await orchestrator.resume_deployment(db, record)
    return success_response(
        MarketDetail.from_domain(market).model_dump(),
        getattr(request.state, "request_id", None),
    )
