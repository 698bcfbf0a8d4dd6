"""Infrastructure factories and FastAPI dependencies.

The engine and session factory are created by the application lifespan and
kept on ``app.state``; request-scoped dependencies read them from there.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fuel_ledger.config import Settings, get_settings
from fuel_ledger.repositories.refresh_token_repository import RefreshTokenRepository
from fuel_ledger.repositories.transaction_repository import TransactionRepository
from fuel_ledger.repositories.user_repository import UserRepository
from fuel_ledger.services.auth_service import AuthService
from fuel_ledger.services.stock_service import StockService
from fuel_ledger.services.user_service import UserService

# ---------------------------------------------------------------------------
# Factories (called from the lifespan and scripts)
# ---------------------------------------------------------------------------


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------------------------
# Request-scoped dependencies
# ---------------------------------------------------------------------------


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit on success, roll back on any error."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DBSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_user_repo(db: DBSession) -> UserRepository:
    return UserRepository(db)


def get_refresh_token_repo(db: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(db)


def get_transaction_repo(db: DBSession) -> TransactionRepository:
    return TransactionRepository(db)


UserRepo = Annotated[UserRepository, Depends(get_user_repo)]
RefreshTokenRepo = Annotated[RefreshTokenRepository, Depends(get_refresh_token_repo)]
TransactionRepo = Annotated[TransactionRepository, Depends(get_transaction_repo)]


def get_stock_service(repo: TransactionRepo, settings: AppSettings) -> StockService:
    return StockService(repo, settings)


def get_auth_service(
    users: UserRepo,
    tokens: RefreshTokenRepo,
    settings: AppSettings,
) -> AuthService:
    return AuthService(users, tokens, settings)


def get_user_service(repo: UserRepo) -> UserService:
    return UserService(repo)


StockSvc = Annotated[StockService, Depends(get_stock_service)]
AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
UserSvc = Annotated[UserService, Depends(get_user_service)]
