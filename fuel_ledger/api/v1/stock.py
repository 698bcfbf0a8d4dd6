"""Stock ledger API endpoints."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from fuel_ledger.auth.dependencies import CurrentUser, require_role
from fuel_ledger.dependencies import StockSvc
from fuel_ledger.filters.transaction import TransactionFilter
from fuel_ledger.models.transaction import TransactionType
from fuel_ledger.models.user import UserRole
from fuel_ledger.schemas.stock import InOutTrendResponse, StockSummary, StockTrendResponse
from fuel_ledger.schemas.transaction import (
    StockInCreate,
    StockOutCreate,
    TransactionListResponse,
    TransactionResponse,
)
from fuel_ledger.services.stock_accounting import DEFAULT_TREND_DAYS
from fuel_ledger.utils.audit import audit_logged

router = APIRouter()


@router.get("/summary", response_model=StockSummary)
async def get_summary(
    service: StockSvc,
    category: str | None = None,
    site: str | None = Query(None, description="Alias of category"),
) -> StockSummary:
    """Current stock and today's movements, for one site or all of them."""
    return await service.get_summary(category or site)


@router.post(
    "/in",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_role(UserRole.admin)),
        Depends(audit_logged("stock_in")),
    ],
)
async def add_stock_in(
    data: StockInCreate,
    current_user: CurrentUser,
    service: StockSvc,
) -> TransactionResponse:
    """Record incoming fuel. An optional timestamp back-dates the delivery."""
    txn = await service.add_stock_in(data, current_user)
    return TransactionResponse.from_transaction(txn, username=current_user.username or None)


@router.post(
    "/out",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_role(UserRole.operasional)),
        Depends(audit_logged("stock_out")),
    ],
)
async def use_stock_out(
    data: StockOutCreate,
    current_user: CurrentUser,
    service: StockSvc,
) -> TransactionResponse:
    """Record fuel usage at the caller's own site."""
    txn = await service.use_stock_out(data, current_user)
    return TransactionResponse.from_transaction(txn, username=current_user.username or None)


@router.get(
    "/history",
    response_model=TransactionListResponse,
    dependencies=[Depends(require_role(UserRole.admin, UserRole.operasional))],
)
async def get_history(
    current_user: CurrentUser,
    service: StockSvc,
    type: TransactionType | None = None,
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    user_id: uuid.UUID | None = Query(None, alias="userId"),
    category: str | None = None,
    q: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
) -> TransactionListResponse:
    """Newest-first ledger history. Operators only ever see their own site."""
    filters = TransactionFilter(
        type=type.value if type else None,
        category=category,
        user_id=str(user_id) if user_id else None,
        timestamp__gte=service.localize(start_date),
        timestamp__lte=service.localize(end_date),
    )
    rows, total = await service.get_history(filters, current_user, q=q, page=page, size=size)
    return TransactionListResponse.paginate(
        items=[TransactionResponse.from_transaction(txn, username) for txn, username in rows],
        total=total,
        page=page,
        size=size,
    )


@router.get("/trend", response_model=StockTrendResponse)
async def get_trend(
    service: StockSvc,
    days: int = DEFAULT_TREND_DAYS,
    category: str | None = None,
    site: str | None = Query(None, description="Alias of category"),
) -> StockTrendResponse:
    """Daily opening and closing stock over the trailing ``days`` days."""
    return await service.get_daily_stock_trend(days, category or site)


@router.get("/trend/in-out", response_model=InOutTrendResponse)
async def get_in_out_trend(
    service: StockSvc,
    days: int = DEFAULT_TREND_DAYS,
    category: str | None = None,
    site: str | None = Query(None, description="Alias of category"),
) -> InOutTrendResponse:
    """Daily IN and OUT volumes over the trailing ``days`` days."""
    return await service.get_daily_in_out_trend(days, category or site)
