"""FastAPI dependencies: session token and authenticated wallet address.

Usage in any protected router:
    @router.post("/deployments")
    async def deploy(owner: Annotated[str, Depends(get_current_address)]):
        ...
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.lp_common.errors import NotConnectedError
from src.lp_gateway.auth.jwt_handler import decode_session_token

# auto_error=False: a missing header is NotConnectedError, not a bare 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    return credentials.credentials if credentials else None


async def get_current_address(
    token: Annotated[str | None, Depends(get_session_token)],
) -> str:
    """Wallet address of the caller; NotConnectedError if there is none."""
    if not token:
        raise NotConnectedError()
    return decode_session_token(token)
