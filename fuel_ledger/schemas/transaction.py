"""Pydantic schemas for ledger transactions."""

from datetime import datetime

from pydantic import Field, field_validator

from fuel_ledger.models.transaction import TransactionType
from fuel_ledger.models.user import LEDGER_SITES, Site
from fuel_ledger.schemas.common import Amount, CamelModel, PaginatedResponse


class StockOutCreate(CamelModel):
    """Request schema for recording stock usage; always booked at server time."""

    amount: Amount = Field(gt=0, max_digits=10, decimal_places=2)
    description: str | None = Field(default=None, max_length=500)
    category: Site

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Site) -> Site:
        if v not in LEDGER_SITES:
            raise ValueError(f"category must be one of {sorted(LEDGER_SITES)}")
        return v


class StockInCreate(StockOutCreate):
    """Request schema for recording incoming stock, optionally back-dated."""

    timestamp: datetime | None = None


class TransactionResponse(CamelModel):
    """Public projection of a ledger transaction."""

    id: str
    timestamp: datetime
    type: TransactionType
    amount: Amount
    description: str | None
    category: str
    user_id: str | None
    username: str | None = None

    @classmethod
    def from_transaction(cls, txn, username: str | None = None) -> "TransactionResponse":
        return cls(
            id=txn.id,
            timestamp=txn.timestamp,
            type=txn.type,
            amount=txn.amount,
            description=txn.description,
            category=txn.category,
            user_id=txn.user_id,
            username=username,
        )


class TransactionListResponse(PaginatedResponse):
    """Paginated list of transactions."""

    items: list[TransactionResponse]
