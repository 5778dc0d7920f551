"""
NotaryPro Backend — POS Location Routes
=========================================
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.user import User
from app.schemas.pos_location import (
    PosLocationCreateRequest,
    PosLocationResponse,
    PosLocationUpdateRequest,
)
from app.security import get_current_user
from app.services.pos_location_service import pos_location_service

router = APIRouter(prefix="/api/pos-locations", tags=["POS Locations"])


@router.post("", response_model=PosLocationResponse)
async def create_pos_location(
    body: PosLocationCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PosLocationResponse:
    location = await pos_location_service.create(db, user, body)
    return PosLocationResponse.model_validate(location)


@router.get("", response_model=List[PosLocationResponse])
async def list_pos_locations(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[PosLocationResponse]:
    locations = await pos_location_service.list_for_owner(db, user)
    return [PosLocationResponse.model_validate(loc) for loc in locations]


@router.patch("/{location_id}", response_model=PosLocationResponse)
async def update_pos_location(
    location_id: int,
    body: PosLocationUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PosLocationResponse:
    location = await pos_location_service.set_active(db, user, location_id, body.is_active)
    return PosLocationResponse.model_validate(location)
