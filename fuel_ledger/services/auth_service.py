"""Credential checks and access/refresh token lifecycle."""

from collections.abc import Callable
from datetime import datetime, timedelta

from fuel_ledger.auth.security import (
    create_access_token,
    generate_refresh_token,
    hash_refresh_token,
    verify_password,
)
from fuel_ledger.config import Settings
from fuel_ledger.exceptions import (
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
)
from fuel_ledger.models.base import utc_now
from fuel_ledger.models.user import User
from fuel_ledger.repositories.refresh_token_repository import RefreshTokenRepository
from fuel_ledger.repositories.user_repository import UserRepository
from fuel_ledger.schemas.auth import AuthSession
from fuel_ledger.schemas.user import UserResponse
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)


class AuthService:
    """Login, refresh-token rotation, logout and profile lookup."""

    def __init__(
        self,
        users: UserRepository,
        tokens: RefreshTokenRepository,
        settings: Settings,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.settings = settings
        self._clock = clock or utc_now

    async def login(self, email: str, password: str) -> AuthSession:
        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_digest):
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return await self._issue_session(user)

    async def refresh(self, refresh_token: str) -> AuthSession:
        """Rotate: the presented token is revoked and a fresh pair is issued."""
        now = self._clock()
        record = await self.tokens.get_active_by_hash(hash_refresh_token(refresh_token), now)
        if record is None:
            raise InvalidOrExpiredTokenError()

        user = await self.users.get_by_id(record.user_id)
        if user is None:
            raise InvalidOrExpiredTokenError()

        await self.tokens.revoke(record, now)
        return await self._issue_session(user)

    async def logout(self, user_id: str) -> None:
        revoked = await self.tokens.revoke_all_for_user(user_id, self._clock())
        logger.info("User %s logged out (%d refresh tokens revoked)", user_id, revoked)

    async def get_profile(self, user_id: str) -> UserResponse:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserResponse.from_user(user)

    async def _issue_session(self, user: User) -> AuthSession:
        refresh_token = generate_refresh_token()
        expires_at = self._clock() + timedelta(
            minutes=self.settings.jwt_refresh_token_expire_minutes
        )
        await self.tokens.create(user.id, hash_refresh_token(refresh_token), expires_at)

        return AuthSession(
            access_token=create_access_token(
                user.id,
                user.role_name,
                site=user.site,
                username=user.username,
                email=user.email,
            ),
            refresh_token=refresh_token,
            expires_in=self.settings.jwt_access_token_expire_minutes * 60,
            user=UserResponse.from_user(user),
        )
