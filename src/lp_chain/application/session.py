"""Wallet session checks shared by every operation that signs."""

from src.lp_chain.domain.ports import ChainError, WalletProtocol
from src.lp_common.errors import NotConnectedError


async def require_address(wallet: WalletProtocol, expected: str | None = None) -> str:
    """Connected wallet address, optionally required to equal `expected`."""
    try:
        authenticated = await wallet.is_authenticated()
        address = await wallet.current_address() if authenticated else None
    except ChainError as exc:
        raise NotConnectedError(f"Wallet session unavailable: {exc}") from exc
    if address is None:
        raise NotConnectedError()
    if expected is not None and address != expected:
        raise NotConnectedError(f"Wallet is connected as {address}, not {expected}")
    return address
