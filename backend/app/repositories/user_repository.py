"""
NotaryPro Backend — User & Session Repositories
=================================================
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import UserRole
from app.models.user import User, UserSession
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def create(self, db: AsyncSession, **fields) -> User:
        return await self.add(db, User(**fields))

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_rut(self, db: AsyncSession, rut: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.rut == rut))
        return result.scalar_one_or_none()

    async def list_all(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(desc(User.created_at), User.id))
        return list(result.scalars().all())

    async def exists_with_role(self, db: AsyncSession, role: UserRole) -> bool:
        result = await db.execute(
            select(func.count(User.id)).where(User.role == role)
        )
        return (result.scalar() or 0) > 0

    async def count_by_role(self, db: AsyncSession) -> Dict[UserRole, int]:
        """User count per role; roles with no users report 0."""
        result = await db.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        )
        counts = {role: 0 for role in UserRole}
        for role, count in result.all():
            counts[UserRole(role)] = count
        return counts


class SessionRepository(BaseRepository[UserSession]):
    model = UserSession

    async def create(
        self, db: AsyncSession, sid: str, user_id: str, expire: datetime
    ) -> UserSession:
        return await self.add(db, UserSession(sid=sid, user_id=user_id, expire=expire))

    async def get_active(self, db: AsyncSession, sid: str, now: datetime) -> Optional[UserSession]:
        result = await db.execute(
            select(UserSession).where(UserSession.sid == sid, UserSession.expire > now)
        )
        return result.scalar_one_or_none()

    async def delete(self, db: AsyncSession, sid: str) -> None:
        await db.execute(delete(UserSession).where(UserSession.sid == sid))

    async def purge_expired(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(delete(UserSession).where(UserSession.expire <= now))
        return result.rowcount or 0
