"""
NotaryPro Backend — Notification Service
==========================================

What:  Best-effort delivery of inbox notifications, and inbox queries.
How:   Each notification is written inside a SAVEPOINT of the request's
       transaction, retried with tenacity on transient database errors.
       If it still fails, only the savepoint is rolled back: the workflow
       step that triggered it (already flushed in the same transaction)
       survives, and dispatch() returns None so the caller can report a
       warning.
Who:   DocumentService (new assignment) and CertificationWorkflow
       (certified / rejected); notifications routes.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import NotFoundError
from app.models.enums import NotificationType
from app.models.notification import Notification
from app.models.user import User
from app.repositories.notification_repository import NotificationRepository
from app.security import OwnerOrRole

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, repository: Optional[NotificationRepository] = None):
        self.repository = repository or NotificationRepository()

    async def dispatch(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> Optional[Notification]:
        """
        Deliver a notification without putting the caller's work at risk.

        Returns:
            The stored Notification, or None if delivery failed (logged at
            WARNING). Never raises.
        """
        try:
            notification = await self._write_with_retry(db, user_id, title, message, type)
        except Exception as e:
            logger.warning(
                "Notification '%s' to user %s could not be delivered: %s",
                title,
                user_id,
                str(e),
                exc_info=True,
            )
            return None

        logger.info("Notification %s delivered to user %s: %s", notification.id, user_id, title)
        return notification

    @retry(
        retry=retry_if_exception_type((OperationalError, InterfaceError)),
        stop=stop_after_attempt(settings.notification_retry_attempts),
        wait=wait_exponential_jitter(
            multiplier=settings.notification_retry_wait,
            max=2,
            jitter=0.1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _write_with_retry(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
    ) -> Notification:
        async with db.begin_nested():
            return await self.repository.create(
                db, user_id=user_id, title=title, message=message, type=type
            )

    async def list_for_user(self, db: AsyncSession, user_id: str) -> List[Notification]:
        return await self.repository.list_by_user(db, user_id)

    async def mark_read(self, db: AsyncSession, user: User, notification_id: int) -> Notification:
        """
        Flip the read flag on one of the caller's notifications.

        Raises:
            NotFoundError: unknown notification
            AuthorizationError: the notification belongs to someone else
        """
        notification = await self.repository.get(db, notification_id)
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))

        OwnerOrRole().check(user, owner_id=notification.user_id)

        if not notification.is_read:
            await self.repository.mark_read(db, notification_id)
            await db.refresh(notification)
        return notification


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
