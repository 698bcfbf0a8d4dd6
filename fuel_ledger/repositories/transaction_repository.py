"""Repository for ledger transaction data access."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Row, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.filters.transaction import TransactionFilter
from fuel_ledger.models.transaction import Transaction, TransactionType
from fuel_ledger.models.user import User

_signed_amount = case(
    (Transaction.type == TransactionType.IN.value, Transaction.amount),
    else_=-Transaction.amount,
)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TransactionRepository:
    """Data access layer for the append-only ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        type: TransactionType,
        amount: Decimal,
        category: str,
        timestamp: datetime,
        description: str | None = None,
        user_id: str | None = None,
    ) -> Transaction:
        txn = Transaction(
            type=type.value,
            amount=amount,
            category=category,
            timestamp=timestamp,
            description=description,
            user_id=user_id,
        )
        self.session.add(txn)
        await self.session.flush()
        await self.session.refresh(txn)
        return txn

    async def lock_category(self, category: str) -> None:
        """Serialize balance-checked postings per category until commit."""
        await self.session.execute(select(func.pg_advisory_xact_lock(func.hashtext(category))))

    async def get_balance(
        self,
        category: str | None,
        as_of: datetime,
        *,
        inclusive: bool = True,
    ) -> Decimal:
        """Net IN minus OUT over every movement up to ``as_of``."""
        bound = Transaction.timestamp <= as_of if inclusive else Transaction.timestamp < as_of
        query = select(func.coalesce(func.sum(_signed_amount), 0)).where(bound)
        if category:
            query = query.where(Transaction.category == category)
        result = await self.session.execute(query)
        return Decimal(result.scalar() or 0)

    async def get_totals(
        self,
        category: str | None,
        start: datetime,
        end: datetime,
    ) -> tuple[Decimal, Decimal]:
        """Sum of IN and OUT amounts with ``start <= timestamp <= end``."""
        query = select(
            func.coalesce(
                func.sum(
                    case((Transaction.type == TransactionType.IN.value, Transaction.amount), else_=0)
                ),
                0,
            ),
            func.coalesce(
                func.sum(
                    case((Transaction.type == TransactionType.OUT.value, Transaction.amount), else_=0)
                ),
                0,
            ),
        ).where(Transaction.timestamp >= start, Transaction.timestamp <= end)
        if category:
            query = query.where(Transaction.category == category)
        total_in, total_out = (await self.session.execute(query)).one()
        return Decimal(total_in or 0), Decimal(total_out or 0)

    async def list_movements(
        self,
        category: str | None,
        start: datetime,
        end: datetime,
    ) -> list[Row]:
        """Raw ``(timestamp, type, amount)`` rows in the window, oldest first."""
        query = (
            select(Transaction.timestamp, Transaction.type, Transaction.amount)
            .where(Transaction.timestamp >= start, Transaction.timestamp <= end)
            .order_by(Transaction.timestamp.asc())
        )
        if category:
            query = query.where(Transaction.category == category)
        result = await self.session.execute(query)
        return list(result.all())

    async def get_history(
        self,
        filters: TransactionFilter,
        q: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[tuple[Transaction, str | None]], int]:
        """Newest-first page of ``(transaction, author username)`` pairs and the total."""
        query = filters.filter(
            select(Transaction, User.username).outerjoin(User, Transaction.user_id == User.id)
        )
        count_query = filters.filter(
            select(func.count())
            .select_from(Transaction)
            .outerjoin(User, Transaction.user_id == User.id)
        )

        if q and q.strip():
            pattern = f"%{_escape_like(q.strip())}%"
            condition = or_(
                Transaction.description.ilike(pattern, escape="\\"),
                User.username.ilike(pattern, escape="\\"),
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = (await self.session.execute(count_query)).scalar() or 0

        query = query.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        query = query.offset((page - 1) * size).limit(size)

        result = await self.session.execute(query)
        return [(txn, username) for txn, username in result.all()], total
