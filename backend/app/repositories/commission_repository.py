"""
NotaryPro Backend — Commission Repository
===========================================
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.commission import Commission
from app.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[Commission]):
    model = Commission

    async def create(self, db: AsyncSession, **fields) -> Commission:
        return await self.add(db, Commission(**fields))

    async def get_by_document(self, db: AsyncSession, document_id: int) -> Optional[Commission]:
        result = await db.execute(
            select(Commission).where(Commission.document_id == document_id)
        )
        return result.scalar_one_or_none()

    async def list_by_participant(self, db: AsyncSession, user_id: str) -> List[Commission]:
        """Commissions where the user is the vecino or the certifier."""
        result = await db.execute(
            select(Commission)
            .where(
                or_(
                    Commission.vecino_id == user_id,
                    Commission.certificador_id == user_id,
                )
            )
            .order_by(desc(Commission.created_at), desc(Commission.id))
        )
        return list(result.scalars().all())

    async def list_unpaid(self, db: AsyncSession) -> List[Commission]:
        result = await db.execute(
            select(Commission)
            .where(Commission.is_paid.is_(False))
            .order_by(Commission.created_at, Commission.id)
        )
        return list(result.scalars().all())

    async def mark_paid(self, db: AsyncSession, commission_id: int) -> bool:
        """Flip is_paid; False when the row is missing or already paid."""
        result = await db.execute(
            update(Commission)
            .where(Commission.id == commission_id, Commission.is_paid.is_(False))
            .values(is_paid=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def totals_by_paid_flag(self, db: AsyncSession) -> Dict[bool, Dict[str, object]]:
        """
        Sum and count of total_amount grouped by is_paid.

        Returns:
            {True: {"amount": Decimal, "count": int}, False: {...}}; both keys
            are always present.
        """
        result = await db.execute(
            select(
                Commission.is_paid,
                func.coalesce(func.sum(Commission.total_amount), 0),
                func.count(Commission.id),
            ).group_by(Commission.is_paid)
        )
        totals: Dict[bool, Dict[str, object]] = {
            True: {"amount": Decimal("0.00"), "count": 0},
            False: {"amount": Decimal("0.00"), "count": 0},
        }
        for is_paid, amount, count in result.all():
            totals[bool(is_paid)] = {
                "amount": Decimal(str(amount)).quantize(Decimal("0.01")),
                "count": count,
            }
        return totals
