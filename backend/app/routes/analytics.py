"""
NotaryPro Backend — Analytics Routes (superadmin)
===================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.analytics import DocumentStatsResponse
from app.schemas.commission import CommissionStatsResponse
from app.schemas.user import UserStatsResponse
from app.security import require_superadmin
from app.services.analytics_service import analytics_service

router = APIRouter(
    prefix="/api/analytics",
    tags=["Analytics"],
    dependencies=[Depends(require_superadmin)],
)


@router.get("/documents", response_model=DocumentStatsResponse)
async def document_stats(db: AsyncSession = Depends(get_db_session)) -> DocumentStatsResponse:
    return await analytics_service.document_stats(db)


@router.get("/commissions", response_model=CommissionStatsResponse)
async def commission_stats(db: AsyncSession = Depends(get_db_session)) -> CommissionStatsResponse:
    return await analytics_service.commission_stats(db)


@router.get("/users", response_model=UserStatsResponse)
async def user_stats(db: AsyncSession = Depends(get_db_session)) -> UserStatsResponse:
    return await analytics_service.user_stats(db)
