"""
NotaryPro Backend — User Administration Routes (superadmin)
=============================================================
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.user import UserCreateRequest, UserResponse
from app.security import require_superadmin
from app.services.user_service import user_service

router = APIRouter(prefix="/api/admin/users", tags=["Admin"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    users = await user_service.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={400: {"description": "Duplicate email or invalid RUT", "model": ErrorResponse}},
)
async def create_user(
    body: UserCreateRequest,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.create_user(db, body)
    return UserResponse.model_validate(user)


@router.post(
    "/{user_id}/toggle",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Enable or disable a user",
)
async def toggle_user(
    user_id: str,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.toggle_active(db, admin, user_id)
    return UserResponse.model_validate(user)
