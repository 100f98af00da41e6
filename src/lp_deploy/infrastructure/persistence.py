"""DeploymentRepository: concrete implementation of DeploymentRepositoryProtocol.

All queries use raw text() SQL (no ORM). Writes join the caller's
transaction; the orchestrator commits after every confirmed step.
The upsert only applies when step_rank moves forward, so a stale writer
can never regress a checkpoint.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_common.enums import DeploymentStep
from src.lp_deploy.domain.models import DeploymentRecord
from src.lp_deploy.domain.workflow import step_rank

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, owner_address, name, symbol, description,
    completion_step, token_contract_ref, amm_contract_ref, last_tx_id,
    created_at, updated_at
"""

_GET_RECORD_SQL = text(f"SELECT {_COLUMNS} FROM deployment_records WHERE id = :id")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM deployment_records
    WHERE owner_address = :owner
    ORDER BY created_at DESC, id DESC
""")

_UPSERT_RECORD_SQL = text("""
    INSERT INTO deployment_records (
        id, owner_address, name, symbol, description,
        completion_step, step_rank, token_contract_ref, amm_contract_ref,
        last_tx_id, created_at, updated_at
    ) VALUES (
        :id, :owner_address, :name, :symbol, :description,
        :completion_step, :step_rank, :token_contract_ref, :amm_contract_ref,
        :last_tx_id, :created_at, :updated_at
    )
    ON CONFLICT (id) DO UPDATE SET
        completion_step    = EXCLUDED.completion_step,
        step_rank          = EXCLUDED.step_rank,
        token_contract_ref = COALESCE(deployment_records.token_contract_ref,
                                      EXCLUDED.token_contract_ref),
        amm_contract_ref   = COALESCE(deployment_records.amm_contract_ref,
                                      EXCLUDED.amm_contract_ref),
        last_tx_id         = EXCLUDED.last_tx_id,
        updated_at         = EXCLUDED.updated_at
    WHERE deployment_records.step_rank < EXCLUDED.step_rank
""")

_DELETE_RECORD_SQL = text("DELETE FROM deployment_records WHERE id = :id")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_record(row: object) -> DeploymentRecord:
    return DeploymentRecord(
        id=row.id,  # type: ignore[attr-defined]
        owner_address=row.owner_address,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        symbol=row.symbol,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        completion_step=DeploymentStep(row.completion_step),  # type: ignore[attr-defined]
        token_contract_ref=row.token_contract_ref,  # type: ignore[attr-defined]
        amm_contract_ref=row.amm_contract_ref,  # type: ignore[attr-defined]
        last_tx_id=row.last_tx_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class DeploymentRepository:
    async def get_record(
        self, db: AsyncSession, deployment_id: str
    ) -> DeploymentRecord | None:
        result = await db.execute(_GET_RECORD_SQL, {"id": deployment_id})
        row = result.fetchone()
        return _row_to_record(row) if row else None

    async def list_records_by_owner(
        self, db: AsyncSession, owner_address: str
    ) -> list[DeploymentRecord]:
        result = await db.execute(_LIST_BY_OWNER_SQL, {"owner": owner_address})
        return [_row_to_record(row) for row in result.fetchall()]

    async def save_record(self, db: AsyncSession, record: DeploymentRecord) -> None:
        if record.completion_step is None:
            raise ValueError(f"Deployment {record.id} has no confirmed step to persist")
        await db.execute(
            _UPSERT_RECORD_SQL,
            {
                "id": record.id,
                "owner_address": record.owner_address,
                "name": record.name,
                "symbol": record.symbol,
                "description": record.description,
                "completion_step": record.completion_step.value,
                "step_rank": step_rank(record.completion_step),
                "token_contract_ref": record.token_contract_ref,
                "amm_contract_ref": record.amm_contract_ref,
                "last_tx_id": record.last_tx_id,
                "created_at": record.created_at,
                "updated_at": record.updated_at,
            },
        )

    async def delete_record(self, db: AsyncSession, deployment_id: str) -> None:
        await db.execute(_DELETE_RECORD_SQL, {"id": deployment_id})
