"""Authentication API endpoints."""

from fastapi import APIRouter

from fuel_ledger.auth.dependencies import CurrentUser
from fuel_ledger.dependencies import AuthSvc
from fuel_ledger.schemas.auth import AuthSession, LoginRequest, RefreshRequest
from fuel_ledger.schemas.common import SuccessResponse
from fuel_ledger.schemas.user import UserResponse

router = APIRouter()


@router.post("/login", response_model=AuthSession)
async def login(body: LoginRequest, service: AuthSvc) -> AuthSession:
    """Authenticate with email and password and return a token pair."""
    return await service.login(body.email, body.password)


@router.post("/refresh", response_model=AuthSession)
async def refresh_token(body: RefreshRequest, service: AuthSvc) -> AuthSession:
    """Exchange a refresh token for a new pair; the old refresh token stops working."""
    return await service.refresh(body.refresh_token)


@router.post("/logout", response_model=SuccessResponse)
async def logout(current_user: CurrentUser, service: AuthSvc) -> SuccessResponse:
    """Revoke every outstanding refresh token of the caller."""
    await service.logout(current_user.id)
    return SuccessResponse()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser, service: AuthSvc) -> UserResponse:
    """Return the authenticated user's profile."""
    return await service.get_profile(current_user.id)
