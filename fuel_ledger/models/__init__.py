"""Database models package."""

from fuel_ledger.models.base import Base
from fuel_ledger.models.refresh_token import RefreshToken
from fuel_ledger.models.transaction import Transaction, TransactionType
from fuel_ledger.models.user import LEDGER_SITES, Role, Site, User, UserRole

__all__ = [
    "Base",
    "User",
    "Role",
    "RefreshToken",
    "Transaction",
    "TransactionType",
    "UserRole",
    "Site",
    "LEDGER_SITES",
]
