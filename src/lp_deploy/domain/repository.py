# src/lp_deploy/domain/repository.py
"""Repository Protocol for deployment checkpoints.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lp_deploy.domain.models import DeploymentRecord


class DeploymentRepositoryProtocol(Protocol):
    async def get_record(
        self, db: AsyncSession, deployment_id: str
    ) -> DeploymentRecord | None: ...

    async def list_records_by_owner(
        self, db: AsyncSession, owner_address: str
    ) -> list[DeploymentRecord]: ...

    async def save_record(self, db: AsyncSession, record: DeploymentRecord) -> None: ...

    async def delete_record(self, db: AsyncSession, deployment_id: str) -> None: ...
