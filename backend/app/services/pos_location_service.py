"""
NotaryPro Backend — POS Location Service
==========================================

What:  Registration and activation of the points of sale documents are
       submitted through. The owner of a location is the vecino who
       receives the vecino share of its documents.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.enums import UserRole
from app.models.pos_location import PosLocation
from app.models.user import User
from app.repositories.pos_location_repository import PosLocationRepository
from app.schemas.pos_location import PosLocationCreateRequest
from app.security import OwnerOrRole

logger = logging.getLogger(__name__)


class PosLocationService:
    def __init__(self, repository: Optional[PosLocationRepository] = None):
        self.repository = repository or PosLocationRepository()

    async def create(
        self, db: AsyncSession, owner: User, request: PosLocationCreateRequest
    ) -> PosLocation:
        location = await self.repository.create(
            db,
            name=request.name.strip(),
            address=request.address.strip(),
            commission_rate=request.commission_rate,
            owner_id=owner.id,
        )
        logger.info("POS location %s registered by %s", location.id, owner.id)
        return location

    async def list_for_owner(self, db: AsyncSession, owner: User) -> List[PosLocation]:
        return await self.repository.list_by_owner(db, owner.id)

    async def set_active(
        self, db: AsyncSession, user: User, location_id: int, is_active: bool
    ) -> PosLocation:
        location = await self.repository.get(db, location_id)
        if location is None:
            raise NotFoundError(resource="pos_location", resource_id=str(location_id))

        OwnerOrRole(UserRole.SUPERADMIN).check(user, owner_id=location.owner_id)

        await self.repository.set_active(db, location_id, is_active)
        await db.refresh(location)
        logger.info(
            "POS location %s %s by %s",
            location_id,
            "activated" if is_active else "deactivated",
            user.id,
        )
        return location


# ── Singleton Instance ────────────────────────────────────────────────────
pos_location_service = PosLocationService()
