"""httpx adapters exercised through httpx.MockTransport."""

import json

import httpx
import pytest

from src.lp_chain.application.reader import CurveStateReader
from src.lp_chain.domain.ports import ChainError, ContractCall, DeployContract, MarketRefNotFound
from src.lp_chain.infrastructure.http_gateway import (
    CurveIndexerClient,
    HiroConfirmationSource,
    RemoteSignerWallet,
)
from src.lp_common.enums import TxStatus
from src.lp_common.errors import MarketUnavailableError

HTML = "<html>502 bad gateway</html>"


def _client(handler) -> httpx.AsyncClient:  # type: ignore[no-untyped-def]
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHiroConfirmationSource:
    async def test_polls_until_success(self) -> None:
        replies = iter([
            httpx.Response(404),
            httpx.Response(200, json={"tx_status": "pending"}),
            httpx.Response(200, json={"tx_status": "success"}),
        ])
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return next(replies)

        async with _client(handler) as client:
            source = HiroConfirmationSource(client, "http://node/", poll_interval_s=0)
            confirmation = await source.await_confirmation("0xabc")

        assert confirmation.status == TxStatus.CONFIRMED
        assert confirmation.confirmed
        assert seen == ["/extended/v1/tx/0xabc"] * 3

    async def test_abort_is_failure_with_cause(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"tx_status": "abort_by_response"})) as c:
            confirmation = await HiroConfirmationSource(c, "http://node", 0).await_confirmation("0x1")
        assert confirmation.status == TxStatus.FAILED
        assert confirmation.cause == "abort_by_response"

    async def test_timeout_is_failure(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"tx_status": "pending"})) as c:
            source = HiroConfirmationSource(c, "http://node", poll_interval_s=0.01, timeout_s=0.05)
            confirmation = await source.await_confirmation("0x1")
        assert confirmation.status == TxStatus.FAILED
        assert "not confirmed" in (confirmation.cause or "")

    async def test_server_error_raises(self) -> None:
        async with _client(lambda r: httpx.Response(500)) as c:
            with pytest.raises(ChainError):
                await HiroConfirmationSource(c, "http://node", 0).await_confirmation("0x1")

    async def test_html_status_page_raises(self) -> None:
        async with _client(lambda r: httpx.Response(200, text=HTML)) as c:
            with pytest.raises(ChainError):
                await HiroConfirmationSource(c, "http://node", 0).await_confirmation("0x1")


class TestCurveIndexerClient:
    @pytest.mark.parametrize(
        "reply", [httpx.Response(200, text=HTML), httpx.Response(200, json=[1, 2])]
    )
    async def test_non_object_reply(self, reply: httpx.Response) -> None:
        async with _client(lambda r: reply) as c:
            with pytest.raises(ChainError):
                await CurveIndexerClient(c, "http://idx").query_market_reserves("ST1.x")

    async def test_html_reply_is_market_unavailable(self) -> None:
        async with _client(lambda r: httpx.Response(200, text=HTML)) as c:
            reader = CurveStateReader(CurveIndexerClient(c, "http://idx"))
            with pytest.raises(MarketUnavailableError):
                await reader.fetch("ST1.mat-dex")

    async def test_parses_reserves(self) -> None:
        body = {"real_reserve": "5", "token_reserve": 6, "virtual_reserve": 7, "target_reserve": 8}
        async with _client(lambda r: httpx.Response(200, json=body)) as c:
            reply = await CurveIndexerClient(c, "http://idx").query_market_reserves("ST1.mat-dex")
        assert (reply.real_reserve, reply.token_reserve) == (5, 6)

    async def test_unknown_ref(self) -> None:
        async with _client(lambda r: httpx.Response(404)) as c:
            with pytest.raises(MarketRefNotFound):
                await CurveIndexerClient(c, "http://idx").query_market_reserves("ST1.x")

    async def test_malformed_reply(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"real_reserve": 1})) as c:
            with pytest.raises(ChainError):
                await CurveIndexerClient(c, "http://idx").query_market_reserves("ST1.x")

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as c:
            with pytest.raises(ChainError):
                await CurveIndexerClient(c, "http://idx").query_market_reserves("ST1.x")


class TestRemoteSignerWallet:
    async def test_session_address(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(200, json={"address": "ST1"})

        async with _client(handler) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            assert await wallet.is_authenticated()
            assert await wallet.current_address() == "ST1"

    async def test_no_token_means_no_session(self) -> None:
        async with _client(lambda r: httpx.Response(500)) as c:
            wallet = RemoteSignerWallet(c, "http://signer", None, "testnet")
            assert await wallet.current_address() is None

    async def test_expired_session(self) -> None:
        async with _client(lambda r: httpx.Response(401)) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            assert not await wallet.is_authenticated()

    async def test_submit_deploy_returns_txid(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(json.loads(request.content))
            return httpx.Response(200, json={"txid": "0xdead"})

        async with _client(handler) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            tx_id = await wallet.sign_and_submit(DeployContract("mat-token", "sip010-token"))

        assert tx_id == "0xdead"
        assert captured["kind"] == "deploy_contract"
        assert captured["network"] == "testnet"
        assert captured["action"]["contract_name"] == "mat-token"

    async def test_rejection_raises(self) -> None:
        async with _client(lambda r: httpx.Response(400, text="User rejected the request")) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            with pytest.raises(ChainError):
                await wallet.sign_and_submit(ContractCall("ST1.mat-dex", "buy", ["t", 1]))

    async def test_missing_txid_raises(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={})) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            with pytest.raises(ChainError):
                await wallet.sign_and_submit(ContractCall("ST1.mat-dex", "buy", ["t", 1]))

    async def test_html_session_reply_raises(self) -> None:
        async with _client(lambda r: httpx.Response(200, text=HTML)) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            with pytest.raises(ChainError):
                await wallet.current_address()

    async def test_html_submit_reply_raises(self) -> None:
        async with _client(lambda r: httpx.Response(200, text=HTML)) as c:
            wallet = RemoteSignerWallet(c, "http://signer", "tok", "testnet")
            with pytest.raises(ChainError):
                await wallet.sign_and_submit(ContractCall("ST1.mat-dex", "buy", ["t", 1]))
