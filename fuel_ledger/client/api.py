"""Async HTTP client for the fuel ledger API, as used by the dashboard.

The client keeps the token pair of the signed-in user. When an authenticated
call comes back 401 it refreshes once and retries once; if the refresh itself
fails the session is dropped and ``ReauthenticationRequired`` is raised so the
caller can send the user back to the login screen.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import httpx

from fuel_ledger.schemas.auth import AuthSession
from fuel_ledger.schemas.stock import InOutTrendResponse, StockSummary, StockTrendResponse
from fuel_ledger.schemas.transaction import TransactionListResponse, TransactionResponse
from fuel_ledger.schemas.user import UserResponse
from fuel_ledger.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class StockApiError(Exception):
    """Non-success response from the ledger API."""

    def __init__(self, status_code: int, kind: str, detail: str) -> None:
        self.status_code = status_code
        self.kind = kind
        self.detail = detail
        super().__init__(f"{status_code} {kind}: {detail}")


class ReauthenticationRequired(StockApiError):
    """The session can no longer be refreshed; the user has to log in again."""

    def __init__(self, detail: str = "Session expired, please log in again") -> None:
        super().__init__(401, "Unauthorized", detail)


def _error_from_response(response: httpx.Response) -> StockApiError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return StockApiError(
        response.status_code,
        body.get("kind", "HTTPError"),
        str(body.get("detail", response.reason_phrase)),
    )


class StockApiClient:
    """Thin typed wrapper over ``httpx.AsyncClient``.

    ``base_url`` includes the API prefix, e.g. ``http://localhost:3000/api``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        self._refresh_lock = asyncio.Lock()
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.user: UserResponse | None = None

    async def __aenter__(self) -> "StockApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthSession:
        data = await self._request(
            "POST", "/auth/login", auth=False, json={"email": email, "password": password}
        )
        return self._store_session(AuthSession.model_validate(data))

    async def refresh(self) -> AuthSession:
        """Rotate the token pair. Any failure ends the session."""
        if not self.refresh_token:
            self.clear_session()
            raise ReauthenticationRequired()

        response = await self._http.post(
            "/auth/refresh", json={"refreshToken": self.refresh_token}
        )
        if response.is_error:
            logger.info("Token refresh rejected with %s", response.status_code)
            self.clear_session()
            raise ReauthenticationRequired()
        return self._store_session(AuthSession.model_validate(response.json()))

    async def logout(self) -> None:
        try:
            if self.access_token:
                await self._request("POST", "/auth/logout")
        finally:
            self.clear_session()

    async def me(self) -> UserResponse:
        return UserResponse.model_validate(await self._request("GET", "/auth/me"))

    def clear_session(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    async def get_summary(self, category: str | None = None) -> StockSummary:
        data = await self._request(
            "GET", "/stock/summary", auth=False, params=_params(category=category)
        )
        return StockSummary.model_validate(data)

    async def get_trend(self, days: int = 7, category: str | None = None) -> StockTrendResponse:
        data = await self._request(
            "GET", "/stock/trend", auth=False, params=_params(days=days, category=category)
        )
        return StockTrendResponse.model_validate(data)

    async def get_in_out_trend(
        self, days: int = 7, category: str | None = None
    ) -> InOutTrendResponse:
        data = await self._request(
            "GET", "/stock/trend/in-out", auth=False, params=_params(days=days, category=category)
        )
        return InOutTrendResponse.model_validate(data)

    async def get_history(
        self,
        *,
        type: str | None = None,
        start_date: date | datetime | None = None,
        end_date: date | datetime | None = None,
        user_id: str | None = None,
        category: str | None = None,
        q: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> TransactionListResponse:
        params = _params(
            type=type,
            startDate=start_date.isoformat() if start_date else None,
            endDate=end_date.isoformat() if end_date else None,
            userId=user_id,
            category=category,
            q=q,
            page=page,
            size=size,
        )
        data = await self._request("GET", "/stock/history", params=params)
        return TransactionListResponse.model_validate(data)

    async def add_stock_in(
        self,
        amount: Decimal | float,
        category: str,
        description: str | None = None,
        timestamp: datetime | None = None,
    ) -> TransactionResponse:
        body: dict[str, Any] = {"amount": float(amount), "category": category}
        if description:
            body["description"] = description
        if timestamp:
            body["timestamp"] = timestamp.isoformat()
        return TransactionResponse.model_validate(
            await self._request("POST", "/stock/in", json=body)
        )

    async def use_stock_out(
        self,
        amount: Decimal | float,
        category: str,
        description: str | None = None,
    ) -> TransactionResponse:
        body: dict[str, Any] = {"amount": float(amount), "category": category}
        if description:
            body["description"] = description
        return TransactionResponse.model_validate(
            await self._request("POST", "/stock/out", json=body)
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, *, auth: bool = True, **kwargs) -> Any:
        sent_with = self.access_token
        response = await self._send(method, path, auth=auth, **kwargs)

        if response.status_code == 401 and auth:
            await self._refresh_after_401(sent_with)
            response = await self._send(method, path, auth=auth, **kwargs)

        if response.is_error:
            raise _error_from_response(response)
        return response.json()

    async def _send(self, method: str, path: str, *, auth: bool, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if auth and self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return await self._http.request(method, path, headers=headers, **kwargs)

    async def _refresh_after_401(self, sent_with: str | None) -> None:
        # Concurrent 401s share one refresh: whoever gets the lock second
        # sees a new access token and just retries.
        async with self._refresh_lock:
            if self.access_token is not None and self.access_token != sent_with:
                return
            await self.refresh()

    def _store_session(self, session: AuthSession) -> AuthSession:
        self.access_token = session.access_token
        self.refresh_token = session.refresh_token
        self.user = session.user
        return session


def _params(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
