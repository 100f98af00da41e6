# src/lp_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None: ...

    async def list_markets(
        self, db: AsyncSession, owner_address: str | None, limit: int
    ) -> list[Market]: ...

    async def save_market(self, db: AsyncSession, market: Market) -> None: ...
