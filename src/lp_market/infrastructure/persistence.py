"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
price/progress columns are denormalized from the reserves for listing;
the domain model always re-derives them.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_common.units import ratio_to_decimal
from src.lp_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, owner_address, name, symbol, description,
    token_contract_ref, amm_contract_ref,
    real_reserve, virtual_reserve, token_reserve, target_reserve,
    created_at, updated_at
"""

_GET_MARKET_SQL = text(f"SELECT {_COLUMNS} FROM markets WHERE id = :market_id")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM markets
    WHERE CAST(:owner AS TEXT) IS NULL OR owner_address = CAST(:owner AS TEXT)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# Contract refs and virtual_reserve are immutable: never in the UPDATE list.
_UPSERT_MARKET_SQL = text("""
    INSERT INTO markets (
        id, owner_address, name, symbol, description,
        token_contract_ref, amm_contract_ref,
        real_reserve, virtual_reserve, token_reserve, target_reserve,
        price, progress, created_at, updated_at
    ) VALUES (
        :id, :owner_address, :name, :symbol, :description,
        :token_contract_ref, :amm_contract_ref,
        :real_reserve, :virtual_reserve, :token_reserve, :target_reserve,
        :price, :progress, :created_at, :updated_at
    )
    ON CONFLICT (id) DO UPDATE SET
        real_reserve  = EXCLUDED.real_reserve,
        token_reserve = EXCLUDED.token_reserve,
        target_reserve = EXCLUDED.target_reserve,
        price         = EXCLUDED.price,
        progress      = EXCLUDED.progress,
        updated_at    = EXCLUDED.updated_at
""")

# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        owner_address=row.owner_address,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        symbol=row.symbol,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        token_contract_ref=row.token_contract_ref,  # type: ignore[attr-defined]
        amm_contract_ref=row.amm_contract_ref,  # type: ignore[attr-defined]
        real_reserve=row.real_reserve,  # type: ignore[attr-defined]
        virtual_reserve=row.virtual_reserve,  # type: ignore[attr-defined]
        token_reserve=row.token_reserve,  # type: ignore[attr-defined]
        target_reserve=row.target_reserve,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository. Writes join the caller's transaction; caller commits."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(
        self, db: AsyncSession, owner_address: str | None, limit: int
    ) -> list[Market]:
        result = await db.execute(
            _LIST_MARKETS_SQL, {"owner": owner_address, "limit": limit}
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def save_market(self, db: AsyncSession, market: Market) -> None:
        await db.execute(
            _UPSERT_MARKET_SQL,
            {
                "id": market.id,
                "owner_address": market.owner_address,
                "name": market.name,
                "symbol": market.symbol,
                "description": market.description,
                "token_contract_ref": market.token_contract_ref,
                "amm_contract_ref": market.amm_contract_ref,
                "real_reserve": market.real_reserve,
                "virtual_reserve": market.virtual_reserve,
                "token_reserve": market.token_reserve,
                "target_reserve": market.target_reserve,
                "price": ratio_to_decimal(market.price),
                "progress": ratio_to_decimal(market.progress, places=4),
                "created_at": market.created_at,
                "updated_at": market.updated_at,
            },
        )
