"""Declarative filters for ledger history queries."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi_filter.contrib.sqlalchemy import Filter

from fuel_ledger.models.transaction import Transaction


class TransactionFilter(Filter):
    """FilterSet for ledger history.

    Built by the history endpoint from its query params::

        ?type=OUT              -> type
        ?category=GENSET       -> category
        ?userId=<uuid>         -> user_id
        ?startDate=2025-05-01  -> timestamp__gte
        ?endDate=2025-05-07    -> timestamp__lte

    Free-text search spans the author's username, which lives on another
    table, so it is applied by the repository rather than here.
    """

    type: Optional[str] = None
    category: Optional[str] = None
    user_id: Optional[str] = None
    timestamp__gte: Optional[datetime] = None
    timestamp__lte: Optional[datetime] = None
    order_by: Optional[list[str]] = None

    class Constants(Filter.Constants):
        model = Transaction
