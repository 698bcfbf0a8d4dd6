"""Stock accounting engine: postings, summary, trends and history."""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from fuel_ledger.auth.policy import ensure_authorized, ensure_site_access
from fuel_ledger.config import Settings
from fuel_ledger.exceptions import ForbiddenError, InsufficientStockError, ValidationError
from fuel_ledger.filters.transaction import TransactionFilter
from fuel_ledger.models.base import utc_now
from fuel_ledger.models.transaction import Transaction, TransactionType
from fuel_ledger.models.user import LEDGER_SITES, Site, UserRole
from fuel_ledger.repositories.transaction_repository import TransactionRepository
from fuel_ledger.schemas.auth import TokenUser
from fuel_ledger.schemas.stock import InOutTrendResponse, StockSummary, StockTrendResponse
from fuel_ledger.schemas.transaction import StockInCreate, StockOutCreate
from fuel_ledger.services import stock_accounting as acct
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)


class StockService:
    """Validates and records stock movements and derives balances from the ledger.

    ``clock`` returns an aware UTC datetime; every public method reads it once
    so the "today" window and the running balance never disagree.
    """

    def __init__(
        self,
        repo: TransactionRepository,
        settings: Settings,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings
        self.tz = settings.ledger_timezone
        self._clock = clock or utc_now

    # ------------------------------------------------------------------
    # Postings
    # ------------------------------------------------------------------

    async def add_stock_in(self, data: StockInCreate, actor: TokenUser) -> Transaction:
        ensure_authorized(actor, {UserRole.admin})
        category = self._ledger_category(data.category)
        amount = self._positive_amount(data.amount)
        timestamp = self._localize(data.timestamp) if data.timestamp else self._clock()

        txn = await self.repo.create(
            type=TransactionType.IN,
            amount=amount,
            category=category,
            timestamp=timestamp,
            description=data.description,
            user_id=actor.id,
        )
        logger.info("Stock IN %s on %s by %s", amount, category, actor.username or actor.id)
        return txn

    async def use_stock_out(self, data: StockOutCreate, actor: TokenUser) -> Transaction:
        ensure_authorized(actor, {UserRole.operasional})
        category = self._ledger_category(data.category)
        ensure_site_access(actor, category)
        amount = self._positive_amount(data.amount)
        now = self._clock()

        if self.settings.enforce_non_negative_stock:
            await self.repo.lock_category(category)
            balance = await self.repo.get_balance(category, now)
            if balance - amount < 0:
                raise InsufficientStockError(
                    f"Cannot use {amount} from {category}: only {balance} in stock"
                )

        txn = await self.repo.create(
            type=TransactionType.OUT,
            amount=amount,
            category=category,
            timestamp=now,
            description=data.description,
            user_id=actor.id,
        )
        logger.info("Stock OUT %s on %s by %s", amount, category, actor.username or actor.id)
        return txn

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def get_summary(self, category: str | None = None) -> StockSummary:
        category = self._scope_category(category)
        now = self._clock()
        day_start = acct.start_of_day(acct.local_today(now, self.tz), self.tz)

        opening = await self.repo.get_balance(category, day_start, inclusive=False)
        today_in, today_out = await self.repo.get_totals(category, day_start, now)
        closing = opening + today_in - today_out

        return StockSummary(
            current_stock=closing,
            today_usage=today_out,
            today_initial_stock=opening,
            today_stock_in=today_in,
            today_stock_out=today_out,
            today_closing_stock=closing,
        )

    async def get_daily_stock_trend(
        self,
        days: int = acct.DEFAULT_TREND_DAYS,
        category: str | None = None,
    ) -> StockTrendResponse:
        days = acct.validate_trend_days(days)
        category = self._scope_category(category)
        now = self._clock()
        window = acct.trend_window(acct.local_today(now, self.tz), days)
        window_start = acct.start_of_day(window[0], self.tz)

        opening = await self.repo.get_balance(category, window_start, inclusive=False)
        movements = await self.repo.list_movements(category, window_start, now)
        buckets = acct.bucket_by_day(movements, self.tz)

        return StockTrendResponse(
            timezone=self.settings.stock_timezone,
            start_date=window[0],
            end_date=window[-1],
            days=days,
            points=acct.build_stock_trend(window, opening, buckets),
        )

    async def get_daily_in_out_trend(
        self,
        days: int = acct.DEFAULT_TREND_DAYS,
        category: str | None = None,
    ) -> InOutTrendResponse:
        days = acct.validate_trend_days(days)
        category = self._scope_category(category)
        now = self._clock()
        window = acct.trend_window(acct.local_today(now, self.tz), days)
        window_start = acct.start_of_day(window[0], self.tz)

        movements = await self.repo.list_movements(category, window_start, now)
        buckets = acct.bucket_by_day(movements, self.tz)

        return InOutTrendResponse(
            timezone=self.settings.stock_timezone,
            start_date=window[0],
            end_date=window[-1],
            days=days,
            points=acct.build_in_out_trend(window, buckets),
        )

    async def get_history(
        self,
        filters: TransactionFilter,
        actor: TokenUser,
        *,
        q: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[tuple[Transaction, str | None]], int]:
        ensure_authorized(actor, {UserRole.admin, UserRole.operasional})

        if filters.timestamp__gte and filters.timestamp__lte:
            if filters.timestamp__gte > filters.timestamp__lte:
                raise ValidationError("startDate must not be after endDate")

        if actor.role == UserRole.operasional:
            if actor.site not in LEDGER_SITES:
                raise ForbiddenError("Operational user has no site assigned")
            # Site scope comes from the token, never from the query
            filters = TransactionFilter(
                type=filters.type,
                category=actor.site,
                timestamp__gte=filters.timestamp__gte,
                timestamp__lte=filters.timestamp__lte,
            )
        elif filters.category is not None:
            filters = TransactionFilter(
                type=filters.type,
                category=self._scope_category(filters.category),
                user_id=filters.user_id,
                timestamp__gte=filters.timestamp__gte,
                timestamp__lte=filters.timestamp__lte,
            )

        return await self.repo.get_history(filters, q=q, page=page, size=size)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def localize(self, value: datetime | None) -> datetime | None:
        """Naive client datetimes are read as ledger-local time."""
        return self._localize(value) if value else None

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value

    @staticmethod
    def _positive_amount(amount: Decimal) -> Decimal:
        if amount is None or amount <= 0:
            raise ValidationError("amount must be greater than zero")
        return amount

    @staticmethod
    def _ledger_category(category: str) -> str:
        if category not in LEDGER_SITES:
            raise ValidationError(f"Unknown category: {category}")
        return Site(category).value

    @staticmethod
    def _scope_category(category: str | None) -> str | None:
        """``None`` or ``ALL`` aggregate every site."""
        if category is None or category == Site.ALL:
            return None
        if category not in LEDGER_SITES:
            raise ValidationError(f"Unknown category: {category}")
        return Site(category).value

