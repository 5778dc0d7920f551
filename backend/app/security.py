"""
NotaryPro Backend — Authentication & Access Control
=====================================================

What:  Password hashing, bearer-token handling, and the capability checks
       every endpoint runs before touching the workflow.
How:   Capabilities are small objects with a `check(user, owner_id=None)`
       method that either returns or raises. Routes declare them through
       `Depends(require(...))`; services apply ownership checks once the
       record (and therefore its owner) is loaded.
Who:   Routers (dependencies), DocumentService/CertificationWorkflow and
       friends (ownership), UserService (login/logout).

Capability Set:
    Authenticated()          → caller has a live session and is active
    HasRole(*roles)          → ... and has one of the roles
    OwnerOrRole(*roles)      → ... and owns the record or has one of the roles

    AuthenticationError (401) is raised when there is no identity at all;
    AuthorizationError (403) when there is one but it is not enough.

Tokens:
    HS256 JWT with claims sub (user id), role, jti, iat, exp. The jti must
    match a live row in `sessions`, so logout (row deleted) revokes the
    token immediately even though it has not expired yet.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import AuthenticationError, AuthorizationError
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.user_repository import SessionRepository, UserRepository

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Password Hashing
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

def create_access_token(user: User, now: Optional[datetime] = None) -> Tuple[str, str, datetime]:
    """
    Mint a bearer token for `user`.

    Returns:
        (token, jti, expires_at). The caller persists (jti, expires_at) as
        a session row; the token is useless without it.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(hours=settings.jwt_expiry_hours)
    jti = uuid.uuid4().hex
    payload = {
        "sub": user.id,
        "role": user.role.value,
        "jti": jti,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, jti, expires_at


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "jti", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Session expired. Please log in again.")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid authentication token")
    return claims


# ══════════════════════════════════════════════════════════════════════════
# Capabilities
# ══════════════════════════════════════════════════════════════════════════

class Capability(ABC):
    """A yes-or-raise access check."""

    @abstractmethod
    def check(self, user: Optional[User], owner_id: Optional[str] = None) -> None:
        ...

    def allows(self, user: Optional[User], owner_id: Optional[str] = None) -> bool:
        """check() as a predicate, for filtering and branching."""
        try:
            self.check(user, owner_id)
        except (AuthenticationError, AuthorizationError):
            return False
        return True


class Authenticated(Capability):
    def check(self, user: Optional[User], owner_id: Optional[str] = None) -> None:
        if user is None:
            raise AuthenticationError()
        if not user.is_active:
            raise AuthorizationError(
                message="This account is disabled",
                context={"user_id": user.id},
            )


class HasRole(Authenticated):
    def __init__(self, *roles: UserRole):
        self.roles = frozenset(roles)

    def _has_role(self, user: User) -> bool:
        return user.role in self.roles

    def check(self, user: Optional[User], owner_id: Optional[str] = None) -> None:
        super().check(user, owner_id)
        if not self._has_role(user):
            raise AuthorizationError(
                message="Your role does not allow this action",
                context={
                    "user_id": user.id,
                    "role": user.role.value,
                    "required": sorted(r.value for r in self.roles),
                },
            )


class OwnerOrRole(HasRole):
    """
    Passes for the record owner, or for any of `roles`.

    With no roles it is a pure ownership check.
    """

    def check(self, user: Optional[User], owner_id: Optional[str] = None) -> None:
        Authenticated.check(self, user, owner_id)
        if owner_id is not None and user.id == owner_id:
            return
        if not self._has_role(user):
            raise AuthorizationError(
                message="You do not have access to this record",
                context={"user_id": user.id, "owner_id": owner_id},
            )


# ══════════════════════════════════════════════════════════════════════════
# FastAPI Dependencies
# ══════════════════════════════════════════════════════════════════════════

bearer_scheme = HTTPBearer(auto_error=False)

_users = UserRepository()
_sessions = SessionRepository()


@dataclass
class AuthContext:
    user: User
    session_id: str


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    """
    Resolve the caller from the Authorization header.

    Raises:
        AuthenticationError: missing/invalid/expired token, revoked session,
            or the user no longer exists
        AuthorizationError: the user is disabled
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    claims = decode_access_token(credentials.credentials)
    session = await _sessions.get_active(db, claims["jti"], datetime.now(timezone.utc))
    if session is None or session.user_id != claims["sub"]:
        raise AuthenticationError(message="Session expired or revoked. Please log in again.")

    user = await _users.get(db, claims["sub"])
    if user is None:
        raise AuthenticationError(message="Account no longer exists")

    Authenticated().check(user)
    return AuthContext(user=user, session_id=session.sid)


async def get_current_user(ctx: AuthContext = Depends(get_auth_context)) -> User:
    return ctx.user


def require(capability: Capability) -> Callable[..., Any]:
    """
    Build a dependency that runs `capability` against the caller.

    Usage:
        @router.get("/pending")
        async def pending(user: User = Depends(require(HasRole(UserRole.CERTIFICADOR)))):
            ...
    """

    async def dependency(user: User = Depends(get_current_user)) -> User:
        capability.check(user)
        return user

    return dependency


# Shared instances for the checks routes use most
require_certifier = require(HasRole(UserRole.CERTIFICADOR))
require_superadmin = require(HasRole(UserRole.SUPERADMIN))
