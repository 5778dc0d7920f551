"""
NotaryPro Backend — POS Location Repository
=============================================
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pos_location import PosLocation
from app.repositories.base import BaseRepository


class PosLocationRepository(BaseRepository[PosLocation]):
    model = PosLocation

    async def create(self, db: AsyncSession, **fields) -> PosLocation:
        return await self.add(db, PosLocation(**fields))

    async def list_by_owner(self, db: AsyncSession, owner_id: str) -> List[PosLocation]:
        result = await db.execute(
            select(PosLocation)
            .where(PosLocation.owner_id == owner_id)
            .order_by(PosLocation.id)
        )
        return list(result.scalars().all())

    async def set_active(self, db: AsyncSession, location_id: int, is_active: bool) -> None:
        await db.execute(
            update(PosLocation)
            .where(PosLocation.id == location_id)
            .values(is_active=is_active, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
