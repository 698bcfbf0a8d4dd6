"""Pydantic schemas for authentication."""

from pydantic import EmailStr, Field

from fuel_ledger.schemas.common import CamelModel
from fuel_ledger.schemas.user import UserResponse


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class TokenUser(CamelModel):
    """Authenticated principal reconstructed from access-token claims."""

    id: str
    username: str = ""
    email: str = ""
    role: str
    site: str = "ALL"


class AuthSession(CamelModel):
    """Token pair plus the sanitized profile of the signed-in user."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
