"""FastAPI dependencies wiring chain collaborators from settings.

Routers depend on these; tests replace them via app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends

from config.settings import settings
from src.lp_chain.application.reader import CurveStateReader
from src.lp_chain.domain.ports import ConfirmationProtocol, WalletProtocol
from src.lp_chain.infrastructure.http_client import get_http_client
from src.lp_chain.infrastructure.http_gateway import (
    CurveIndexerClient,
    HiroConfirmationSource,
    RemoteSignerWallet,
)
from src.lp_gateway.auth.dependencies import get_session_token


def get_curve_reader() -> CurveStateReader:
    return CurveStateReader(CurveIndexerClient(get_http_client(), settings.CURVE_INDEXER_URL))


def get_confirmation_source() -> ConfirmationProtocol:
    return HiroConfirmationSource(
        get_http_client(),
        settings.CHAIN_API_URL,
        poll_interval_s=settings.CONFIRMATION_POLL_INTERVAL_S,
        timeout_s=settings.CONFIRMATION_TIMEOUT_S,
    )


def get_wallet(
    session_token: Annotated[str | None, Depends(get_session_token)],
) -> WalletProtocol:
    return RemoteSignerWallet(
        get_http_client(),
        settings.WALLET_SIGNER_URL,
        session_token=session_token,
        network=settings.CHAIN_NETWORK,
    )
