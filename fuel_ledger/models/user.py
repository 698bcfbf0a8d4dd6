"""User and role models for authentication and RBAC."""

import enum

from sqlalchemy import ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fuel_ledger.models.base import Base, TimestampMixin, UUIDMixin


class UserRole(enum.StrEnum):
    admin = "admin"
    operasional = "operasional"


class Site(enum.StrEnum):
    """Operational site a user is scoped to; ``ALL`` is only valid for users."""

    ALL = "ALL"
    GENSET = "GENSET"
    TUG_ASSIST = "TUG_ASSIST"


# Sites a transaction can be booked against.
LEDGER_SITES: frozenset[Site] = frozenset({Site.GENSET, Site.TUG_ASSIST})


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)


class User(UUIDMixin, TimestampMixin, Base):
    """Ledger user: an administrator or a site-bound operator."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_digest: Mapped[str] = mapped_column(String(255), nullable=False)
    site: Mapped[str] = mapped_column(String(50), nullable=False, default=Site.ALL.value)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False)

    role: Mapped[Role] = relationship(lazy="joined")

    @property
    def role_name(self) -> str:
        return self.role.name


# Case-insensitive uniqueness is the authoritative guard; services check first
# only to return a friendlier Conflict.
Index("uq_users_username_lower", func.lower(User.username), unique=True)
Index("uq_users_email_lower", func.lower(User.email), unique=True)
