"""002: deployment_records table: resumable provisioning checkpoints

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE deployment_records (
            id                  VARCHAR(160)    PRIMARY KEY,
            owner_address       VARCHAR(128)    NOT NULL,
            name                VARCHAR(32)     NOT NULL,
            symbol              VARCHAR(10)     NOT NULL,
            description         VARCHAR(200)    NOT NULL DEFAULT '',
            completion_step     VARCHAR(24)     NOT NULL,
            step_rank           SMALLINT        NOT NULL,
            token_contract_ref  VARCHAR(200)    NOT NULL,
            amm_contract_ref    VARCHAR(200),
            last_tx_id          VARCHAR(128),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_deployments_owner_symbol UNIQUE (owner_address, symbol),
            CONSTRAINT ck_deployments_step CHECK (
                completion_step IN (
                    'TOKEN_DEPLOYED', 'AMM_DEPLOYED', 'AMM_INITIALIZED', 'SUPPLY_TRANSFERRED'
                )
            ),
            CONSTRAINT ck_deployments_rank CHECK (step_rank BETWEEN 1 AND 4),
            CONSTRAINT ck_deployments_amm_ref CHECK (step_rank < 2 OR amm_contract_ref IS NOT NULL)
        );
    """)
    op.execute(
        "CREATE INDEX idx_deployments_owner ON deployment_records (owner_address, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_deployment_records_updated_at
            BEFORE UPDATE ON deployment_records
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS deployment_records CASCADE;")
