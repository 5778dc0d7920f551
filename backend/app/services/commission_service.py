"""
NotaryPro Backend — Commission Service
========================================

What:  The revenue split of a certified document, and commission queries.
Who:   CertificationWorkflow (compute_split, resolve_vecino_id) and the
       commissions / admin / analytics routes.

Split Rules:
    total        = price, 2 decimals
    vecino       = round(total × 0.40, 2)
    certificador = round(total × 0.35, 2)
    admin        = round(total × 0.25, 2) + residual

    Rounding is ROUND_HALF_UP per line. The residual
    total - (vecino + certificador + admin) is added to the admin share, so
    the three amounts always add up to the total exactly.

    Example: 10000.00 → 4000.00 / 3500.00 / 2500.00
             0.05     → 0.02 / 0.02 / 0.01   (0.018→0.02, 0.0175→0.02, 0.0125→0.01)
             0.10     → 0.04 / 0.04 / 0.02   (admin 0.03 - 0.01 residual)
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundError, StateConflictError
from app.models.commission import Commission
from app.models.document import Document
from app.models.pos_location import PosLocation
from app.repositories.commission_repository import CommissionRepository
from app.schemas.commission import CommissionStatsResponse

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CommissionSplit:
    vecino_amount: Decimal
    certificador_amount: Decimal
    admin_amount: Decimal
    total_amount: Decimal


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_split(
    price: Decimal,
    vecino_share: Optional[Decimal] = None,
    certificador_share: Optional[Decimal] = None,
    admin_share: Optional[Decimal] = None,
) -> CommissionSplit:
    """Split `price` into vecino / certificador / admin amounts (see module docstring)."""
    vecino_share = settings.commission_vecino_share if vecino_share is None else vecino_share
    certificador_share = (
        settings.commission_certificador_share
        if certificador_share is None
        else certificador_share
    )
    admin_share = settings.commission_admin_share if admin_share is None else admin_share

    total = _round(Decimal(price))
    vecino = _round(total * vecino_share)
    certificador = _round(total * certificador_share)
    admin = _round(total * admin_share)

    residual = total - (vecino + certificador + admin)
    if residual:
        logger.debug("Commission rounding residual %s added to admin share", residual)
        admin += residual

    return CommissionSplit(
        vecino_amount=vecino,
        certificador_amount=certificador,
        admin_amount=admin,
        total_amount=total,
    )


def resolve_vecino_id(document: Document, pos_location: Optional[PosLocation]) -> str:
    """
    Who receives the vecino share.

    The owner of the POS location the document came through; without a
    location, the submitter themself.
    """
    if pos_location is not None and pos_location.owner_id:
        return pos_location.owner_id
    return document.submitter_id


class CommissionService:
    def __init__(self, repository: Optional[CommissionRepository] = None):
        self.repository = repository or CommissionRepository()

    async def list_for_user(self, db: AsyncSession, user_id: str) -> List[Commission]:
        return await self.repository.list_by_participant(db, user_id)

    async def list_unpaid(self, db: AsyncSession) -> List[Commission]:
        return await self.repository.list_unpaid(db)

    async def mark_paid(self, db: AsyncSession, commission_id: int) -> Commission:
        """
        Record the payout of a commission.

        Raises:
            NotFoundError: unknown commission
            StateConflictError: already paid
        """
        commission = await self.repository.get(db, commission_id)
        if commission is None:
            raise NotFoundError(resource="commission", resource_id=str(commission_id))

        if not await self.repository.mark_paid(db, commission_id):
            raise StateConflictError(
                message=f"Commission {commission_id} is already paid",
                current_state="paid",
            )
        await db.refresh(commission)
        logger.info(
            "Commission %s marked paid (total=%s)", commission.id, commission.total_amount
        )
        return commission

    async def stats(self, db: AsyncSession) -> CommissionStatsResponse:
        totals = await self.repository.totals_by_paid_flag(db)
        paid, unpaid = totals[True], totals[False]
        return CommissionStatsResponse(
            total_amount=paid["amount"] + unpaid["amount"],
            total_count=paid["count"] + unpaid["count"],
            paid_amount=paid["amount"],
            paid_count=paid["count"],
            unpaid_amount=unpaid["amount"],
            unpaid_count=unpaid["count"],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
commission_service = CommissionService()
