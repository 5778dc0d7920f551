"""
NotaryPro Backend — User Service
==================================

What:  Login/logout, superadmin user management, and the startup
       bootstrap of the first superadmin.
How:   Passwords are bcrypt-hashed (app.security); each login stores a row
       in `sessions` keyed by the token's jti, and logout deletes it.
Who:   Auth and admin routes; the application lifespan (bootstrap).
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.user_repository import SessionRepository, UserRepository
from app.schemas.user import UserCreateRequest, UserStatsResponse
from app.security import create_access_token, hash_password, verify_password
from app.services.identity_service import format_rut, is_valid_rut

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        users: Optional[UserRepository] = None,
        sessions: Optional[SessionRepository] = None,
    ):
        self.users = users or UserRepository()
        self.sessions = sessions or SessionRepository()

    # ── Authentication ────────────────────────────────────────────────────

    async def login(
        self, db: AsyncSession, email: str, password: str
    ) -> Tuple[str, datetime, User]:
        """
        Exchange credentials for a bearer token.

        Returns:
            (token, expires_at, user)

        Raises:
            AuthenticationError: unknown email or wrong password (same
                message for both)
            AuthorizationError: the account is disabled
        """
        user = await self.users.get_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise AuthenticationError(message="Invalid email or password")

        if not user.is_active:
            raise AuthorizationError(
                message="This account is disabled",
                context={"user_id": user.id},
            )

        token, jti, expires_at = create_access_token(user)
        await self.sessions.create(db, sid=jti, user_id=user.id, expire=expires_at)
        purged = await self.sessions.purge_expired(db, datetime.now(timezone.utc))
        if purged:
            logger.debug("Purged %d expired sessions", purged)

        logger.info("User %s logged in", user.id)
        return token, expires_at, user

    async def logout(self, db: AsyncSession, session_id: str) -> None:
        await self.sessions.delete(db, session_id)
        logger.info("Session %s revoked", session_id)

    # ── Management ────────────────────────────────────────────────────────

    async def create_user(self, db: AsyncSession, request: UserCreateRequest) -> User:
        """
        Raises:
            ValidationError: duplicate email, malformed RUT or duplicate RUT
        """
        if await self.users.get_by_email(db, request.email) is not None:
            raise ValidationError(
                message="A user with this email already exists",
                field="email",
            )

        rut = None
        if request.rut:
            if not is_valid_rut(request.rut):
                raise ValidationError(message="The RUT is not valid", field="rut")
            rut = format_rut(request.rut)
            if await self.users.get_by_rut(db, rut) is not None:
                raise ValidationError(
                    message="A user with this RUT already exists",
                    field="rut",
                )

        user = await self.users.create(
            db,
            email=request.email.lower(),
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
            rut=rut,
            phone=request.phone,
            address=request.address,
            password_hash=hash_password(request.password),
        )
        logger.info("User %s created with role %s", user.id, user.role.value)
        return user

    async def list_users(self, db: AsyncSession) -> List[User]:
        return await self.users.list_all(db)

    async def toggle_active(self, db: AsyncSession, actor: User, user_id: str) -> User:
        """
        Flip a user's is_active flag.

        Raises:
            NotFoundError: unknown user
            ValidationError: a superadmin tried to disable themself
        """
        user = await self.users.get(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        if user.id == actor.id:
            raise ValidationError(message="You cannot disable your own account")

        user.is_active = not user.is_active
        await db.flush()
        logger.info(
            "User %s %s by %s",
            user.id,
            "enabled" if user.is_active else "disabled",
            actor.id,
        )
        return user

    async def stats(self, db: AsyncSession) -> UserStatsResponse:
        counts = await self.users.count_by_role(db)
        return UserStatsResponse(
            total_users=sum(counts.values()),
            by_role={role.value: count for role, count in counts.items()},
        )

    # ── Bootstrap ─────────────────────────────────────────────────────────

    async def ensure_bootstrap_admin(self, db: AsyncSession) -> Optional[User]:
        """
        Create the configured superadmin when none exists.

        Returns the created user, or None when a superadmin already exists or
        no bootstrap password is configured.
        """
        if await self.users.exists_with_role(db, UserRole.SUPERADMIN):
            return None

        if not settings.bootstrap_admin_password:
            logger.warning(
                "No superadmin exists and BOOTSTRAP_ADMIN_PASSWORD is not set; "
                "admin endpoints are unreachable until one is created"
            )
            return None

        user = await self.users.create(
            db,
            email=settings.bootstrap_admin_email.lower(),
            first_name="Admin",
            last_name="NotaryPro",
            role=UserRole.SUPERADMIN,
            password_hash=hash_password(settings.bootstrap_admin_password),
        )
        logger.info("Bootstrap superadmin %s created (%s)", user.id, user.email)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
