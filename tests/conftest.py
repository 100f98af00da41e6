"""Shared test fixtures."""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeChain,
    InMemoryDeploymentRepository,
    InMemoryMarketRepository,
)


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def deploy_repo() -> InMemoryDeploymentRepository:
    return InMemoryDeploymentRepository()


@pytest.fixture
def market_repo() -> InMemoryMarketRepository:
    return InMemoryMarketRepository()
