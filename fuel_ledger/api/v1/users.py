"""User management API endpoints (admin only)."""

from fastapi import APIRouter, Depends, status

from fuel_ledger.auth.dependencies import require_role
from fuel_ledger.dependencies import UserSvc
from fuel_ledger.models.user import UserRole
from fuel_ledger.schemas.common import SuccessResponse
from fuel_ledger.schemas.user import UserCreate, UserResponse, UserUpdate
from fuel_ledger.utils.audit import audit_logged

router = APIRouter(dependencies=[Depends(require_role(UserRole.admin))])


@router.get("", response_model=list[UserResponse])
async def list_users(service: UserSvc) -> list[UserResponse]:
    """List all users, newest first."""
    return await service.list_users()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audit_logged("create_user"))],
)
async def create_user(data: UserCreate, service: UserSvc) -> UserResponse:
    """Provision a user. Operational users must name a specific site."""
    return await service.create_user(data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserSvc) -> UserResponse:
    return await service.get_user(user_id)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(audit_logged("update_user"))],
)
async def update_user(user_id: str, data: UserUpdate, service: UserSvc) -> UserResponse:
    """Partially update a user; the password is re-hashed when supplied."""
    return await service.update_user(user_id, data)


@router.delete(
    "/{user_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(audit_logged("delete_user"))],
)
async def delete_user(user_id: str, service: UserSvc) -> SuccessResponse:
    """Delete a user. Their past transactions keep an empty author."""
    await service.delete_user(user_id)
    return SuccessResponse()
