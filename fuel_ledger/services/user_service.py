"""User provisioning and maintenance."""

from fuel_ledger.auth.security import hash_password
from fuel_ledger.exceptions import ConflictError, NotFoundError, ValidationError
from fuel_ledger.models.user import Role, Site, User, UserRole
from fuel_ledger.repositories.user_repository import UserRepository
from fuel_ledger.schemas.user import UserCreate, UserResponse, UserUpdate
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)


def check_site_assignment(role: str, site: str | None) -> None:
    """Operational users must be bound to a concrete site."""
    if role == UserRole.operasional and (not site or site == Site.ALL):
        raise ValidationError("Operational users must be assigned to a specific site")


class UserService:
    """CRUD over users with uniqueness and role/site invariants."""

    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    async def list_users(self) -> list[UserResponse]:
        return [UserResponse.from_user(u) for u in await self.repo.get_all()]

    async def get_user(self, user_id: str) -> UserResponse:
        return UserResponse.from_user(await self._get_or_404(user_id))

    async def create_user(self, data: UserCreate) -> UserResponse:
        await self._ensure_unique_email(data.email)
        await self._ensure_unique_username(data.username)

        site = data.site.value if data.site else None
        if data.role == UserRole.admin:
            site = site or Site.ALL.value
        check_site_assignment(data.role, site)

        user = User(
            username=data.username,
            email=data.email,
            password_digest=hash_password(data.password),
            site=site,
            role=await self._get_role(data.role),
        )
        user = await self.repo.create(user)
        logger.info("Created %s user %s (%s)", data.role, user.id, site)
        return UserResponse.from_user(user)

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResponse:
        user = await self._get_or_404(user_id)
        fields = data.model_fields_set

        if data.email and data.email.lower() != user.email.lower():
            await self._ensure_unique_email(data.email)
            user.email = data.email

        if data.username and data.username.lower() != user.username.lower():
            await self._ensure_unique_username(data.username)
            user.username = data.username

        if data.role:
            user.role = await self._get_role(data.role)

        if "site" in fields:
            user.site = data.site.value if data.site else Site.ALL.value

        # Checked against the resulting combination, whatever changed
        check_site_assignment(user.role_name, user.site)

        if data.password:
            user.password_digest = hash_password(data.password)

        user = await self.repo.save(user)
        logger.info("Updated user %s (%s)", user.id, ", ".join(sorted(fields)) or "no changes")
        return UserResponse.from_user(user)

    async def delete_user(self, user_id: str) -> None:
        if not await self.repo.delete(user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s", user_id)

    async def _get_or_404(self, user_id: str) -> User:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _get_role(self, name: str) -> Role:
        role = await self.repo.get_role(name)
        if role is None:
            raise ValidationError(f"Role {name} is not available")
        return role

    async def _ensure_unique_email(self, email: str) -> None:
        if await self.repo.get_by_email(email):
            raise ConflictError("Email is already in use")

    async def _ensure_unique_username(self, username: str) -> None:
        if await self.repo.get_by_username(username):
            raise ConflictError("Username is already in use")
