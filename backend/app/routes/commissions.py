"""
NotaryPro Backend — Commission Routes
=======================================

What:  GET /api/commissions for participants, and the superadmin payout
       queue under /api/admin/commissions.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.user import User
from app.schemas.commission import CommissionResponse
from app.schemas.common import ErrorResponse
from app.security import get_current_user, require_superadmin
from app.services.commission_service import commission_service

router = APIRouter(prefix="/api", tags=["Commissions"])


@router.get(
    "/commissions",
    response_model=List[CommissionResponse],
    summary="Commissions where the caller is the vecino or the certifier",
)
async def list_commissions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommissionResponse]:
    commissions = await commission_service.list_for_user(db, user.id)
    return [CommissionResponse.model_validate(c) for c in commissions]


@router.get(
    "/admin/commissions/unpaid",
    response_model=List[CommissionResponse],
    summary="Payout queue, oldest first",
)
async def list_unpaid_commissions(
    user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommissionResponse]:
    commissions = await commission_service.list_unpaid(db)
    return [CommissionResponse.model_validate(c) for c in commissions]


@router.post(
    "/admin/commissions/{commission_id}/pay",
    response_model=CommissionResponse,
    responses={
        404: {"description": "Commission not found", "model": ErrorResponse},
        409: {"description": "Already paid", "model": ErrorResponse},
    },
    summary="Mark a commission as paid",
)
async def pay_commission(
    commission_id: int,
    user: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db_session),
) -> CommissionResponse:
    commission = await commission_service.mark_paid(db, commission_id)
    return CommissionResponse.model_validate(commission)
