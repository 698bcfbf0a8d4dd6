"""Idempotent default data: roles plus one admin and one site operator."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuel_ledger.auth.security import hash_password
from fuel_ledger.config import Settings
from fuel_ledger.models.user import Role, Site, User, UserRole
from fuel_ledger.repositories.user_repository import UserRepository
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USERS = [
    {
        "username": "Admin Bosowa",
        "email": "admin@example.com",
        "role": UserRole.admin,
        "site": Site.ALL,
    },
    {
        "username": "Operasional Lapangan",
        "email": "op@example.com",
        "role": UserRole.operasional,
        "site": Site.GENSET,
    },
]


async def seed_roles(repo: UserRepository) -> dict[str, Role]:
    """Ensure every role exists and return them by name."""
    roles: dict[str, Role] = {}
    for name in UserRole:
        role = await repo.get_role(name.value)
        if role is None:
            role = await repo.create_role(name.value)
            logger.info("Created role '%s'", name.value)
        roles[name.value] = role
    return roles


async def seed_default_users(session: AsyncSession, settings: Settings) -> int:
    """Create missing default users. Returns how many were created."""
    repo = UserRepository(session)
    roles = await seed_roles(repo)

    created = 0
    for user_data in DEFAULT_USERS:
        if await repo.get_by_email(user_data["email"]):
            logger.info("Default user '%s' already exists, skipping", user_data["email"])
            continue

        await repo.create(
            User(
                username=user_data["username"],
                email=user_data["email"],
                password_digest=hash_password(settings.default_user_password),
                site=user_data["site"].value,
                role=roles[user_data["role"].value],
            )
        )
        created += 1
        logger.info("Created default %s user '%s'", user_data["role"], user_data["email"])

    await session.commit()
    return created


async def seed_default_data(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> None:
    """Best-effort startup seeding; a failure never prevents the service from starting."""
    if not settings.seed_default_users:
        logger.info("Seeding default users skipped (SEED_DEFAULT_USERS=false)")
        return

    try:
        async with session_factory() as session:
            await seed_default_users(session, settings)
    except Exception:
        logger.exception("Failed to seed default data")
