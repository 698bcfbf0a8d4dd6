"""Response schemas for stock summary and trend reporting."""

import datetime as dt

from fuel_ledger.schemas.common import Amount, CamelModel


class StockSummary(CamelModel):
    current_stock: Amount
    today_usage: Amount
    today_initial_stock: Amount
    today_stock_in: Amount
    today_stock_out: Amount
    today_closing_stock: Amount


class StockTrendPoint(CamelModel):
    date: dt.date
    label: str
    opening_stock: Amount
    closing_stock: Amount
    delta: Amount


class InOutPoint(CamelModel):
    date: dt.date
    label: str
    total_in: Amount
    total_out: Amount


class _TrendEnvelope(CamelModel):
    timezone: str
    start_date: dt.date
    end_date: dt.date
    days: int


class StockTrendResponse(_TrendEnvelope):
    points: list[StockTrendPoint]


class InOutTrendResponse(_TrendEnvelope):
    points: list[InOutPoint]
