"""Wallet-session token verification.

Session tokens are issued by the wallet auth service after the user proves
control of an address; "sub" is that address. This service only verifies
them (shared HS256 secret), it never issues or revokes sessions.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.lp_common.errors import NotConnectedError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_SESSION_TYPE = "wallet_session"


def decode_session_token(token: str) -> str:
    """Return the wallet address carried by a valid session token.

    Raises:
        NotConnectedError: token invalid, expired, wrong type or without "sub".
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise NotConnectedError("Wallet session is invalid or expired") from None

    if payload.get("type") != _SESSION_TYPE:
        raise NotConnectedError("Token is not a wallet session")
    address = payload.get("sub")
    if not address:
        raise NotConnectedError("Wallet session has no address")
    return str(address)
