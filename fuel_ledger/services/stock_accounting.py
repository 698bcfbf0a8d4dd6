"""Pure stock accounting: calendar windows, daily bucketing and trend series.

Nothing here performs I/O. The stock service fetches balances and raw
movements from the ledger and hands them to these functions together with
a single ``now`` and a single timezone, so every figure in one response is
computed against the same clock.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from decimal import Decimal

from fuel_ledger.exceptions import ValidationError
from fuel_ledger.models.transaction import TransactionType
from fuel_ledger.schemas.stock import InOutPoint, StockTrendPoint

MIN_TREND_DAYS = 1
MAX_TREND_DAYS = 30
DEFAULT_TREND_DAYS = 7

ZERO = Decimal("0")


@dataclass
class DailyTotals:
    total_in: Decimal = ZERO
    total_out: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.total_in - self.total_out


def validate_trend_days(days: int) -> int:
    if not MIN_TREND_DAYS <= days <= MAX_TREND_DAYS:
        raise ValidationError(
            f"days must be between {MIN_TREND_DAYS} and {MAX_TREND_DAYS}, got {days}"
        )
    return days


def local_today(now: datetime, tz: tzinfo) -> date:
    return now.astimezone(tz).date()


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Local midnight of ``day`` expressed in UTC."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(UTC)


def trend_window(today: date, days: int) -> list[date]:
    """The trailing ``days`` calendar days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def day_label(day: date) -> str:
    return day.strftime("%d %b")


def bucket_by_day(
    movements: Iterable[tuple[datetime, str, Decimal]],
    tz: tzinfo,
) -> dict[date, DailyTotals]:
    """Group raw ``(timestamp, type, amount)`` movements by local calendar day."""
    buckets: dict[date, DailyTotals] = {}
    for timestamp, txn_type, amount in movements:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        day = timestamp.astimezone(tz).date()
        totals = buckets.setdefault(day, DailyTotals())
        if txn_type == TransactionType.IN:
            totals.total_in += Decimal(amount)
        else:
            totals.total_out += Decimal(amount)
    return buckets


def build_stock_trend(
    window: list[date],
    opening_balance: Decimal,
    buckets: dict[date, DailyTotals],
) -> list[StockTrendPoint]:
    """Chain daily opening/closing stock starting from the pre-window balance."""
    points: list[StockTrendPoint] = []
    opening = opening_balance
    for day in window:
        totals = buckets.get(day, DailyTotals())
        closing = opening + totals.net
        points.append(
            StockTrendPoint(
                date=day,
                label=day_label(day),
                opening_stock=opening,
                closing_stock=closing,
                delta=closing - opening,
            )
        )
        opening = closing
    return points


def build_in_out_trend(
    window: list[date],
    buckets: dict[date, DailyTotals],
) -> list[InOutPoint]:
    points = []
    for day in window:
        totals = buckets.get(day, DailyTotals())
        points.append(
            InOutPoint(
                date=day,
                label=day_label(day),
                total_in=totals.total_in,
                total_out=totals.total_out,
            )
        )
    return points
