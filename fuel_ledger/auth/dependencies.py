"""FastAPI dependencies for bearer authentication and role checks."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from fuel_ledger.auth.policy import ensure_authorized
from fuel_ledger.auth.security import decode_token
from fuel_ledger.exceptions import UnauthorizedError
from fuel_ledger.schemas.auth import TokenUser

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenUser:
    """Resolve the principal from the access token without touching the DB."""
    if credentials is None:
        raise UnauthorizedError()

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as err:
        raise UnauthorizedError("Invalid or expired access token") from err

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise UnauthorizedError("Invalid token: missing claims")

    return TokenUser(
        id=user_id,
        role=role,
        site=payload.get("site") or "ALL",
        username=payload.get("username", ""),
        email=payload.get("email", ""),
    )


CurrentUser = Annotated[TokenUser, Depends(get_current_user)]


def require_role(*roles: str):
    """Dependency factory rejecting principals outside ``roles`` with 403."""

    async def _check(current_user: CurrentUser) -> TokenUser:
        ensure_authorized(current_user, roles)
        return current_user

    return _check
