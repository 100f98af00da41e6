"""httpx implementations of the chain collaborator Protocols.

- HiroConfirmationSource: polls GET {CHAIN_API_URL}/extended/v1/tx/{txid}
- CurveIndexerClient:     GET {CURVE_INDEXER_URL}/v1/markets/{ref}/reserves
- RemoteSignerWallet:     wallet session + signAndSubmit through the signer
                          service, authenticated with the caller's session token

Every transport failure surfaces as ChainError; callers decide what it means.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Any

import httpx

from src.lp_chain.domain.ports import (
    ChainAction,
    ChainError,
    Confirmation,
    DeployContract,
    MarketRefNotFound,
    ReservesReply,
)
from src.lp_common.enums import TxStatus

logger = logging.getLogger(__name__)

_SUCCESS = "success"
_PENDING = {"pending", ""}


async def _get_json(client: httpx.AsyncClient, url: str, **kwargs: Any) -> httpx.Response:
    try:
        return await client.get(url, **kwargs)
    except httpx.HTTPError as exc:
        raise ChainError(f"GET {url} failed: {exc}") from exc


def _json(resp: httpx.Response) -> dict[str, Any]:
    """Body of a reply that must be a JSON object (not an HTML error page)."""
    try:
        body = resp.json()
    except ValueError as exc:
        raise ChainError(
            f"non-JSON reply from {resp.request.url}: HTTP {resp.status_code}"
        ) from exc
    if not isinstance(body, dict):
        raise ChainError(f"unexpected reply from {resp.request.url}: {type(body).__name__}")
    return body


class HiroConfirmationSource:
    """Polls transaction status at a caller-controlled interval.

    timeout_s=None waits until the transaction is final; a hung confirmation
    only blocks the awaiting workflow.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        poll_interval_s: float,
        timeout_s: float | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._poll_interval_s = poll_interval_s
        self._timeout_s = timeout_s

    async def await_confirmation(self, tx_id: str) -> Confirmation:
        try:
            return await asyncio.wait_for(self._poll(tx_id), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            return Confirmation(
                tx_id=tx_id,
                status=TxStatus.FAILED,
                cause=f"not confirmed within {self._timeout_s}s",
            )

    async def _poll(self, tx_id: str) -> Confirmation:
        url = f"{self._base_url}/extended/v1/tx/{tx_id}"
        while True:
            resp = await _get_json(self._client, url)
            # 404 until the node has indexed the broadcast
            if resp.status_code != 404:
                if resp.status_code >= 400:
                    raise ChainError(f"tx status {tx_id}: HTTP {resp.status_code}")
                tx_status = str(_json(resp).get("tx_status", ""))
                if tx_status == _SUCCESS:
                    return Confirmation(tx_id=tx_id, status=TxStatus.CONFIRMED)
                if tx_status not in _PENDING:
                    return Confirmation(tx_id=tx_id, status=TxStatus.FAILED, cause=tx_status)
            logger.debug("tx %s pending, next poll in %.1fs", tx_id, self._poll_interval_s)
            await asyncio.sleep(self._poll_interval_s)


class CurveIndexerClient:
    """Reads pool reserves; no caching, every call hits the indexer."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def query_market_reserves(self, market_ref: str) -> ReservesReply:
        resp = await _get_json(self._client, f"{self._base_url}/v1/markets/{market_ref}/reserves")
        if resp.status_code == 404:
            raise MarketRefNotFound(market_ref)
        if resp.status_code >= 400:
            raise ChainError(f"reserves {market_ref}: HTTP {resp.status_code}")
        body = _json(resp)
        try:
            return ReservesReply(
                real_reserve=int(body["real_reserve"]),
                token_reserve=int(body["token_reserve"]),
                virtual_reserve=int(body["virtual_reserve"]),
                target_reserve=int(body["target_reserve"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainError(f"malformed reserves reply for {market_ref}: {exc}") from exc


class RemoteSignerWallet:
    """Wallet session bound to one caller's session token.

    The signer service holds the keys; this side never sees them.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        session_token: str | None,
        network: str,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._session_token = session_token
        self._network = network

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._session_token}"}

    async def current_address(self) -> str | None:
        if not self._session_token:
            return None
        resp = await _get_json(self._client, f"{self._base_url}/v1/session", headers=self._headers())
        if resp.status_code in (401, 403, 404):
            return None
        if resp.status_code >= 400:
            raise ChainError(f"wallet session: HTTP {resp.status_code}")
        address = _json(resp).get("address")
        return str(address) if address else None

    async def is_authenticated(self) -> bool:
        return await self.current_address() is not None

    async def sign_and_submit(self, action: ChainAction) -> str:
        kind = "deploy_contract" if isinstance(action, DeployContract) else "call_contract"
        payload = {"network": self._network, "kind": kind, "action": asdict(action)}
        url = f"{self._base_url}/v1/transactions"
        try:
            resp = await self._client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise ChainError(f"POST {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ChainError(f"signer rejected {kind}: HTTP {resp.status_code} {resp.text}")
        tx_id = _json(resp).get("txid")
        if not tx_id:
            raise ChainError("No transaction ID returned from signer")
        return str(tx_id)
