"""Unit tests for wallet-session token verification and dependencies."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from src.lp_chain.application.session import require_address
from src.lp_chain.domain.ports import ChainError
from src.lp_common.errors import NotConnectedError
from src.lp_gateway.auth.dependencies import get_current_address, get_session_token
from src.lp_gateway.auth.jwt_handler import decode_session_token
from tests.fakes import OTHER, OWNER, FakeChain, session_token


def test_decode_valid_session() -> None:
    assert decode_session_token(session_token()) == OWNER


def test_wrong_type_rejected() -> None:
    with pytest.raises(NotConnectedError):
        decode_session_token(session_token(kind="access"))


def test_missing_sub_rejected() -> None:
    with pytest.raises(NotConnectedError):
        decode_session_token(session_token(sub=None))


def test_expired_rejected() -> None:
    token = session_token(exp=datetime.now(UTC) - timedelta(seconds=1))
    with pytest.raises(NotConnectedError):
        decode_session_token(token)


def test_foreign_signature_rejected() -> None:
    token = jwt.encode({"sub": OWNER, "type": "wallet_session"}, "other-secret", algorithm="HS256")
    with pytest.raises(NotConnectedError):
        decode_session_token(token)


async def test_session_token_dependency() -> None:
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="abc")
    assert await get_session_token(creds) == "abc"
    assert await get_session_token(None) is None


async def test_current_address_requires_token() -> None:
    with pytest.raises(NotConnectedError):
        await get_current_address(None)
    assert await get_current_address(session_token()) == OWNER


class TestRequireAddress:
    async def test_returns_address(self) -> None:
        assert await require_address(FakeChain()) == OWNER

    async def test_no_session(self) -> None:
        with pytest.raises(NotConnectedError):
            await require_address(FakeChain(address=None))

    async def test_mismatch(self) -> None:
        with pytest.raises(NotConnectedError):
            await require_address(FakeChain(), expected=OTHER)

    async def test_signer_unreachable(self) -> None:
        chain = FakeChain()

        async def down() -> bool:
            raise ChainError("connection refused")

        chain.is_authenticated = down  # type: ignore[method-assign]
        with pytest.raises(NotConnectedError):
            await require_address(chain)
