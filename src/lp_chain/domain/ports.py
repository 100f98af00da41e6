# src/lp_chain/domain/ports.py
"""Collaborator Protocols: the chain, the wallet and the confirmation source.

Services depend on these Protocols only. Unit tests inject in-memory fakes;
infrastructure/http_gateway.py provides the httpx implementations.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.lp_common.enums import TxStatus


class ChainError(Exception):
    """Transport-level failure talking to a chain collaborator."""


class MarketRefNotFound(ChainError):
    """The referenced AMM artifact does not exist on chain."""


@dataclass(frozen=True)
class DeployContract:
    contract_name: str
    template: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContractCall:
    contract_ref: str
    function_name: str
    args: list[Any] = field(default_factory=list)


ChainAction = DeployContract | ContractCall


@dataclass(frozen=True)
class Confirmation:
    tx_id: str
    status: TxStatus
    cause: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.status == TxStatus.CONFIRMED


@dataclass(frozen=True)
class ReservesReply:
    real_reserve: int
    token_reserve: int
    virtual_reserve: int
    target_reserve: int


class WalletProtocol(Protocol):
    async def is_authenticated(self) -> bool: ...

    async def current_address(self) -> str | None: ...

    async def sign_and_submit(self, action: ChainAction) -> str: ...


class ConfirmationProtocol(Protocol):
    async def await_confirmation(self, tx_id: str) -> Confirmation: ...


class ChainStateProtocol(Protocol):
    async def query_market_reserves(self, market_ref: str) -> ReservesReply: ...
