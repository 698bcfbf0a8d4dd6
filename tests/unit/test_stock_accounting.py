"""Unit tests for the pure stock accounting helpers."""

from datetime import UTC, date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from fuel_ledger.exceptions import ValidationError
from fuel_ledger.services import stock_accounting as acct

MAKASSAR = ZoneInfo("Asia/Makassar")


class TestValidateTrendDays:
    @pytest.mark.parametrize("days", [1, 7, 30])
    def test_accepts_bounds(self, days):
        assert acct.validate_trend_days(days) == days

    @pytest.mark.parametrize("days", [0, 31, -1])
    def test_rejects_out_of_range(self, days):
        with pytest.raises(ValidationError):
            acct.validate_trend_days(days)


class TestCalendar:
    def test_local_today_crosses_midnight(self):
        # 16:30 UTC is 00:30 the next day in UTC+8
        now = datetime(2025, 5, 7, 16, 30, tzinfo=UTC)
        assert acct.local_today(now, MAKASSAR) == date(2025, 5, 8)

    def test_start_of_day_is_local_midnight_in_utc(self):
        assert acct.start_of_day(date(2025, 5, 8), MAKASSAR) == datetime(
            2025, 5, 7, 16, 0, tzinfo=UTC
        )

    def test_trend_window_is_oldest_first_and_ends_today(self):
        window = acct.trend_window(date(2025, 5, 8), 3)
        assert window == [date(2025, 5, 6), date(2025, 5, 7), date(2025, 5, 8)]

    def test_single_day_window(self):
        assert acct.trend_window(date(2025, 1, 1), 1) == [date(2025, 1, 1)]

    def test_window_spans_month_boundary(self):
        window = acct.trend_window(date(2025, 3, 2), 3)
        assert window[0] == date(2025, 2, 28)

    def test_day_label(self):
        assert acct.day_label(date(2025, 5, 8)) == "08 May"


class TestBucketByDay:
    def test_groups_by_local_day(self):
        movements = [
            (datetime(2025, 5, 7, 15, 59, tzinfo=UTC), "IN", Decimal("10")),
            (datetime(2025, 5, 7, 16, 0, tzinfo=UTC), "IN", Decimal("20")),
            (datetime(2025, 5, 7, 17, 0, tzinfo=UTC), "OUT", Decimal("5")),
        ]
        buckets = acct.bucket_by_day(movements, MAKASSAR)
        assert buckets[date(2025, 5, 7)].total_in == Decimal("10")
        assert buckets[date(2025, 5, 8)].total_in == Decimal("20")
        assert buckets[date(2025, 5, 8)].total_out == Decimal("5")
        assert buckets[date(2025, 5, 8)].net == Decimal("15")

    def test_naive_timestamps_are_utc(self):
        buckets = acct.bucket_by_day(
            [(datetime(2025, 5, 7, 16, 0), "OUT", Decimal("1"))], MAKASSAR
        )
        assert date(2025, 5, 8) in buckets

    def test_empty(self):
        assert acct.bucket_by_day([], MAKASSAR) == {}


class TestBuildStockTrend:
    def test_chains_opening_and_closing(self):
        window = acct.trend_window(date(2025, 5, 8), 3)
        buckets = {
            date(2025, 5, 6): acct.DailyTotals(Decimal("100"), Decimal("0")),
            date(2025, 5, 8): acct.DailyTotals(Decimal("0"), Decimal("30.5")),
        }
        points = acct.build_stock_trend(window, Decimal("50"), buckets)

        assert [p.opening_stock for p in points] == [Decimal("50"), Decimal("150"), Decimal("150")]
        assert [p.closing_stock for p in points] == [
            Decimal("150"),
            Decimal("150"),
            Decimal("119.5"),
        ]
        assert points[1].delta == Decimal("0")
        assert points[2].delta == Decimal("-30.5")

    def test_continuity(self):
        window = acct.trend_window(date(2025, 5, 30), 30)
        buckets = {
            day: acct.DailyTotals(Decimal(i), Decimal(i % 3)) for i, day in enumerate(window)
        }
        points = acct.build_stock_trend(window, Decimal("0"), buckets)
        for prev, nxt in zip(points, points[1:]):
            assert prev.closing_stock == nxt.opening_stock

    def test_labels_and_dates(self):
        window = acct.trend_window(date(2025, 5, 8), 2)
        points = acct.build_stock_trend(window, Decimal("0"), {})
        assert [p.date for p in points] == window
        assert points[-1].label == "08 May"


class TestBuildInOutTrend:
    def test_zero_filled(self):
        window = acct.trend_window(date(2025, 5, 8), 7)
        points = acct.build_in_out_trend(window, {})
        assert len(points) == 7
        assert all(p.total_in == 0 and p.total_out == 0 for p in points)
        assert points[-1].date == date(2025, 5, 8)

    def test_uses_buckets(self):
        window = [date(2025, 5, 8)]
        buckets = {date(2025, 5, 8): acct.DailyTotals(Decimal("7"), Decimal("2"))}
        (point,) = acct.build_in_out_trend(window, buckets)
        assert point.total_in == Decimal("7")
        assert point.total_out == Decimal("2")
