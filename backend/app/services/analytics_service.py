"""
NotaryPro Backend — Analytics Service
=======================================

What:  Read-only aggregates for the superadmin dashboard.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import DocumentStatus
from app.repositories.document_repository import DocumentRepository
from app.schemas.analytics import DocumentStatsResponse
from app.schemas.commission import CommissionStatsResponse
from app.schemas.user import UserStatsResponse
from app.services.commission_service import commission_service
from app.services.user_service import user_service


class AnalyticsService:
    def __init__(self, documents: Optional[DocumentRepository] = None):
        self.documents = documents or DocumentRepository()

    async def document_stats(self, db: AsyncSession) -> DocumentStatsResponse:
        counts = await self.documents.count_by_status(db)
        return DocumentStatsResponse(
            total=sum(counts.values()),
            certified=counts[DocumentStatus.CERTIFIED],
            pending=counts[DocumentStatus.PENDING_CERTIFICATION],
            by_status={status.value: count for status, count in counts.items()},
        )

    async def commission_stats(self, db: AsyncSession) -> CommissionStatsResponse:
        return await commission_service.stats(db)

    async def user_stats(self, db: AsyncSession) -> UserStatsResponse:
        return await user_service.stats(db)


# ── Singleton Instance ────────────────────────────────────────────────────
analytics_service = AnalyticsService()
