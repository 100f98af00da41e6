"""001: updated_at trigger function + markets table

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(160)    PRIMARY KEY,
            owner_address       VARCHAR(128)    NOT NULL,
            name                VARCHAR(32)     NOT NULL,
            symbol              VARCHAR(10)     NOT NULL,
            description         VARCHAR(200)    NOT NULL DEFAULT '',
            token_contract_ref  VARCHAR(200)    NOT NULL,
            amm_contract_ref    VARCHAR(200)    NOT NULL,
            real_reserve        BIGINT          NOT NULL,
            virtual_reserve     BIGINT          NOT NULL,
            token_reserve       BIGINT          NOT NULL,
            target_reserve      BIGINT          NOT NULL,
            price               NUMERIC(38, 18) NOT NULL,
            progress            NUMERIC(7, 4)   NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_markets_owner_symbol        UNIQUE (owner_address, symbol),
            CONSTRAINT ck_markets_real_reserve_gte_0  CHECK (real_reserve >= 0),
            CONSTRAINT ck_markets_token_reserve_gte_0 CHECK (token_reserve >= 0),
            CONSTRAINT ck_markets_virtual_gt_0        CHECK (virtual_reserve > 0),
            CONSTRAINT ck_markets_target_gt_0         CHECK (target_reserve > 0),
            CONSTRAINT ck_markets_progress_range      CHECK (progress >= 0 AND progress <= 100)
        );
    """)
    op.execute("CREATE INDEX idx_markets_owner ON markets (owner_address, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Finalized bonding-curve pairs; reserves mirror the AMM contract';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
