"""FastAPI dependency: get_current_user_id.

The caller identity is the opaque ``sub`` claim of the bearer token; no user
table is consulted. Usage in any protected router:

    @router.get("/protected")
    async def protected(user_id: Annotated[str, Depends(get_current_user_id)]):
        ...
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.p2p_common.errors import UnauthenticatedError
from src.p2p_gateway.auth.jwt_handler import decode_token

# auto_error=False so a missing header surfaces as our own 1001 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Return the caller's user id. Raises UnauthenticatedError (401)."""
    if credentials is None:
        raise UnauthenticatedError()
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError()
    return user_id
