"""
NotaryPro Backend — Notification Repository
=============================================
"""

from typing import List

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import NotificationType
from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> Notification:
        return await self.add(
            db,
            Notification(user_id=user_id, title=title, message=message, type=type),
        )

    async def list_by_user(self, db: AsyncSession, user_id: str) -> List[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(desc(Notification.created_at), desc(Notification.id))
        )
        return list(result.scalars().all())

    async def mark_read(self, db: AsyncSession, notification_id: int) -> None:
        await db.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
