"""Pydantic schemas for user management."""

from datetime import datetime

from pydantic import EmailStr, Field

from fuel_ledger.models.user import Site, UserRole
from fuel_ledger.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Request schema for provisioning a user."""

    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    role: UserRole
    site: Site | None = None


class UserUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""

    username: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: UserRole | None = None
    site: Site | None = None


class UserResponse(CamelModel):
    """Sanitized user profile; never carries the credential digest."""

    id: str
    username: str
    email: str
    role: str
    site: str
    created_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role_name,
            site=user.site,
            created_at=user.created_at,
        )
