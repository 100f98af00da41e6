"""DeploymentOrchestrator: resumable token + AMM provisioning.

One loop drives both fresh deployments and resumes: it runs
remaining_steps(record.completion_step) and, per step,
  1. submits the step's chain action through the wallet
  2. blocks until the confirmation source reports finality
  3. checkpoints the record and commits, before the next step starts

A record is only advanced after confirmation, so a failure at any point
leaves the last confirmed checkpoint in the store and a later resume
re-submits nothing that was already confirmed. After SUPPLY_TRANSFERRED the
record is replaced by a Market in one commit (the only deletion point).
A store failure on a checkpoint or on finalization is rolled back and
reported as DeploymentFailedError with the last persisted checkpoint.
No automatic retry: resumption is caller-initiated.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_chain.application.session import require_address
from src.lp_chain.domain import contracts
from src.lp_chain.domain.ports import (
    ChainAction,
    ChainError,
    ConfirmationProtocol,
    WalletProtocol,
)
from src.lp_common.datetime_utils import utc_now
from src.lp_common.enums import DeploymentStep
from src.lp_common.errors import (
    AlreadyInProgressError,
    DeploymentFailedError,
    DeploymentNotFoundError,
    MarketAlreadyExistsError,
)
from src.lp_curve.domain.constants import (
    INITIAL_ALLOCATION,
    INITIAL_BASE_RESERVE,
    TARGET_RESERVE,
    VIRTUAL_RESERVE,
)
from src.lp_deploy.domain.models import DeploymentRecord
from src.lp_deploy.domain.repository import DeploymentRepositoryProtocol
from src.lp_deploy.domain.validators import validate_token_metadata
from src.lp_deploy.domain.workflow import deployment_id, remaining_steps
from src.lp_deploy.infrastructure.persistence import DeploymentRepository
from src.lp_deploy.infrastructure.workflow_lock import WorkflowLockProtocol
from src.lp_market.domain.models import Market
from src.lp_market.domain.repository import MarketRepositoryProtocol
from src.lp_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


def _deploy_token(r: DeploymentRecord) -> ChainAction:
    return contracts.deploy_token_action(r.name, r.symbol)


def _deploy_amm(r: DeploymentRecord) -> ChainAction:
    return contracts.deploy_amm_action(r.symbol)


def _initialize_amm(r: DeploymentRecord) -> ChainAction:
    assert r.amm_contract_ref and r.token_contract_ref
    return contracts.initialize_amm_action(r.amm_contract_ref, r.token_contract_ref)


def _transfer_supply(r: DeploymentRecord) -> ChainAction:
    assert r.amm_contract_ref and r.token_contract_ref
    return contracts.transfer_supply_action(
        r.token_contract_ref, r.owner_address, r.amm_contract_ref
    )


_STEP_ACTIONS: dict[DeploymentStep, Callable[[DeploymentRecord], ChainAction]] = {
    DeploymentStep.TOKEN_DEPLOYED: _deploy_token,
    DeploymentStep.AMM_DEPLOYED: _deploy_amm,
    DeploymentStep.AMM_INITIALIZED: _initialize_amm,
    DeploymentStep.SUPPLY_TRANSFERRED: _transfer_supply,
}


def _artifact_refs(step: DeploymentStep, r: DeploymentRecord) -> dict[str, str]:
    """Refs that become known once `step` is confirmed."""
    if step == DeploymentStep.TOKEN_DEPLOYED:
        name = contracts.token_contract_name(r.symbol)
        return {"token_contract_ref": contracts.contract_ref(r.owner_address, name)}
    if step == DeploymentStep.AMM_DEPLOYED:
        name = contracts.amm_contract_name(r.symbol)
        return {"amm_contract_ref": contracts.contract_ref(r.owner_address, name)}
    return {}


class DeploymentOrchestrator:
    def __init__(
        self,
        wallet: WalletProtocol,
        confirmations: ConfirmationProtocol,
        lock: WorkflowLockProtocol,
        repo: DeploymentRepositoryProtocol | None = None,
        market_repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._wallet = wallet
        self._confirmations = confirmations
        self._lock = lock
        self._repo: DeploymentRepositoryProtocol = repo or DeploymentRepository()
        self._market_repo: MarketRepositoryProtocol = market_repo or MarketRepository()

    async def deploy_new_market(
        self,
        db: AsyncSession,
        owner_address: str,
        name: str,
        symbol: str,
        description: str | None,
    ) -> DeploymentRecord:
        """Run a fresh deployment to completion.

        Returns the final (SUPPLY_TRANSFERRED) record; the live copy has been
        deleted and the Market stored under the same id.
        Raises DeploymentFailedError carrying the last persisted checkpoint.
        """
        name, symbol, description = validate_token_metadata(name, symbol, description)
        await require_address(self._wallet, owner_address)
        record_id = deployment_id(owner_address, symbol)

        async with self._lock.hold(record_id):
            if await self._market_repo.get_market_by_id(db, record_id) is not None:
                raise MarketAlreadyExistsError(record_id)
            if await self._repo.get_record(db, record_id) is not None:
                raise AlreadyInProgressError(record_id, "a resumable deployment exists")

            now = utc_now()
            draft = DeploymentRecord(
                id=record_id,
                owner_address=owner_address,
                name=name,
                symbol=symbol,
                description=description,
                completion_step=None,
                token_contract_ref=None,
                amm_contract_ref=None,
                last_tx_id=None,
                created_at=now,
                updated_at=now,
            )
            logger.info("Deployment started: id=%s owner=%s", record_id, owner_address)
            record, _ = await self._advance(db, draft)
            return record

    async def resume_deployment(self, db: AsyncSession, record: DeploymentRecord) -> Market:
        """Continue from the persisted checkpoint of `record`.

        The stored copy is re-read under the lock, so a stale argument can
        never cause a confirmed step to be submitted twice.
        """
        await require_address(self._wallet, record.owner_address)

        async with self._lock.hold(record.id):
            current = await self._repo.get_record(db, record.id)
            if current is None:
                market = await self._market_repo.get_market_by_id(db, record.id)
                if market is not None:
                    return market
                raise DeploymentNotFoundError(record.id)

            logger.info(
                "Deployment resumed: id=%s from=%s", current.id, current.completion_step
            )
            _, market = await self._advance(db, current)
            return market

    async def list_resumable_deployments(
        self, db: AsyncSession, owner_address: str
    ) -> list[DeploymentRecord]:
        return await self._repo.list_records_by_owner(db, owner_address)

    async def get_resumable_deployment(
        self, db: AsyncSession, owner_address: str, record_id: str
    ) -> DeploymentRecord:
        record = await self._repo.get_record(db, record_id)
        if record is None or record.owner_address != owner_address:
            raise DeploymentNotFoundError(record_id)
        return record

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _advance(
        self, db: AsyncSession, record: DeploymentRecord
    ) -> tuple[DeploymentRecord, Market]:
        for step in remaining_steps(record.completion_step):
            record = await self._run_step(db, record, step)
        return record, await self._finalize(db, record)

    async def _run_step(
        self, db: AsyncSession, record: DeploymentRecord, step: DeploymentStep
    ) -> DeploymentRecord:
        checkpoint = record if record.completion_step is not None else None
        action = _STEP_ACTIONS[step](record)

        logger.info("Submitting %s: id=%s", step.value, record.id)
        try:
            tx_id = await self._wallet.sign_and_submit(action)
            confirmation = await self._confirmations.await_confirmation(tx_id)
        except ChainError as exc:
            logger.warning("Step %s failed: id=%s err=%s", step.value, record.id, exc)
            raise DeploymentFailedError(step.value, str(exc), record=checkpoint) from exc

        if not confirmation.confirmed:
            cause = confirmation.cause or confirmation.status.value
            logger.warning(
                "Step %s not confirmed: id=%s tx=%s cause=%s", step.value, record.id, tx_id, cause
            )
            raise DeploymentFailedError(step.value, cause, record=checkpoint)

        advanced = record.advanced_to(step, tx_id, utc_now(), **_artifact_refs(step, record))
        try:
            await self._repo.save_record(db, advanced)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.error(
                "Checkpoint %s not saved: id=%s tx=%s err=%s", step.value, record.id, tx_id, exc
            )
            cause = f"confirmed as {tx_id} but checkpoint not saved: {exc}"
            raise DeploymentFailedError(step.value, cause, record=checkpoint) from exc
        logger.info("Checkpoint %s: id=%s tx=%s", step.value, record.id, tx_id)
        return advanced

    async def _finalize(self, db: AsyncSession, record: DeploymentRecord) -> Market:
        assert record.is_complete and record.token_contract_ref and record.amm_contract_ref
        now = utc_now()
        market = Market(
            id=record.id,
            owner_address=record.owner_address,
            name=record.name,
            symbol=record.symbol,
            description=record.description,
            token_contract_ref=record.token_contract_ref,
            amm_contract_ref=record.amm_contract_ref,
            real_reserve=INITIAL_BASE_RESERVE,
            virtual_reserve=VIRTUAL_RESERVE,
            token_reserve=INITIAL_ALLOCATION,
            target_reserve=TARGET_RESERVE,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._market_repo.save_market(db, market)
            await self._repo.delete_record(db, record.id)
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.error("Finalization failed: id=%s err=%s", record.id, exc)
            step = DeploymentStep.SUPPLY_TRANSFERRED.value
            raise DeploymentFailedError(
                step, f"market not finalized: {exc}", record=record
            ) from exc
        logger.info("Deployment finalized: market=%s", market.id)
        return market
