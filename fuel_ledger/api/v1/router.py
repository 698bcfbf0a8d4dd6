"""API v1 router: aggregates all sub-routers."""

from fastapi import APIRouter

from fuel_ledger.api.v1 import auth, stock, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(stock.router, prefix="/stock", tags=["Stock"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
