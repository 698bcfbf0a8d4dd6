"""Periodic stock summary polling with request coalescing.

At most one summary request is outstanding at any time. A forced fetch that
arrives while one is running is remembered in a single follow-up slot and run
once the current request completes; unforced fetches are simply dropped.
"""

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from fuel_ledger.client.api import StockApiClient, StockApiError
from fuel_ledger.schemas.stock import StockSummary
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


@dataclass
class PendingRequest:
    in_flight: bool = False
    follow_up: bool = False


class SummaryPoller:
    """Keeps ``summary`` fresh for a dashboard view."""

    def __init__(
        self,
        client: StockApiClient,
        *,
        category: str | None = None,
        on_update: Callable[[StockSummary], None] | None = None,
    ) -> None:
        self.client = client
        self.category = category
        self.on_update = on_update
        self.pending = PendingRequest()
        self.summary: StockSummary | None = None
        self.last_error: Exception | None = None
        self.fetch_count = 0
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch(self, force: bool = False) -> bool:
        """Fetch the summary unless a fetch is already running.

        Returns ``True`` when this call performed the fetch itself.
        """
        if self.pending.in_flight:
            if force:
                self.pending.follow_up = True
            return False

        self.pending.in_flight = True
        try:
            await self._fetch_once()
            while self.pending.follow_up:
                self.pending.follow_up = False
                await self._fetch_once()
        finally:
            self.pending.in_flight = False
        return True

    async def refresh_after_transaction(self) -> bool:
        return await self.fetch(force=True)

    def start(self, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(interval))

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self, interval: float) -> None:
        while True:
            await self.fetch()
            await asyncio.sleep(interval)

    async def _fetch_once(self) -> None:
        self.fetch_count += 1
        try:
            summary = await self.client.get_summary(self.category)
        # ValueError covers undecodable bodies and pydantic validation errors
        except (StockApiError, httpx.HTTPError, ValueError) as err:
            logger.warning("Failed to fetch stock summary: %s", err)
            self.last_error = err
            return

        self.summary = summary
        self.last_error = None
        if self.on_update is not None:
            self.on_update(summary)
