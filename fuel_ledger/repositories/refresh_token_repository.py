"""Repository for refresh token records."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.models.refresh_token import RefreshToken


class RefreshTokenRepository:
    """Data access layer for hashed refresh tokens."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        token = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self.session.add(token)
        await self.session.flush()
        return token

    async def get_active_by_hash(self, token_hash: str, now: datetime) -> RefreshToken | None:
        # Row lock so two concurrent refreshes cannot both rotate the same token
        result = await self.session.execute(
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .where(RefreshToken.revoked_at.is_(None))
            .where(RefreshToken.expires_at > now)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def revoke(self, token: RefreshToken, now: datetime) -> None:
        token.revoked_at = now
        await self.session.flush()

    async def revoke_all_for_user(self, user_id: str, now: datetime) -> int:
        result = await self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
        )
        return result.rowcount or 0
