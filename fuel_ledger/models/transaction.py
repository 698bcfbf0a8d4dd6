"""Ledger transaction model."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fuel_ledger.models.base import Base, UUIDMixin, utc_now


class TransactionType(enum.StrEnum):
    IN = "IN"
    OUT = "OUT"


class Transaction(UUIDMixin, Base):
    """A single stock movement. Rows are appended, never updated."""

    __tablename__ = "transactions"

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    type: Mapped[str] = mapped_column(String(3), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    user_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    user = relationship("User", lazy="raise", passive_deletes=True)

    __table_args__ = (
        Index("idx_txn_category_timestamp", "category", "timestamp"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("type IN ('IN', 'OUT')", name="ck_transactions_type"),
    )
