"""
NotaryPro Backend — User and Session SQLAlchemy Models
========================================================

What:  ORM models for the `users` and `sessions` tables.
Who:   UserRepository / SessionRepository, access control, Alembic.

Table Design Rationale:
    - String primary key: identities may come from an external provider
      (their subject id) or be minted locally (`usr_<hex>`)
    - role: fixed enumeration; never changes after creation
    - password_hash: bcrypt hash, NULL for externally authenticated users
    - sessions: one row per issued bearer token (sid = token jti); deleting
      the row revokes the token
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import UserRole, enum_values


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_user_id() -> str:
    return f"usr_{uuid.uuid4().hex[:16]}"


class User(Base):
    """
    A person interacting with the platform.

    Query Patterns:
        - Lookup by id (auth, every request): primary key
        - Lookup by email (login, duplicate check): unique index
        - Count by role (analytics): sequential scan, small table
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_user_id,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
        default=UserRole.USUARIO_FINAL,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Chilean national id, stored as 12345678-K (no dots, uppercase K)
    rut: Mapped[Optional[str]] = mapped_column(String(12), nullable=True, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role.value}', active={self.is_active})>"


class UserSession(Base):
    """An issued bearer token. Expired rows are ignored and purged on login."""

    __tablename__ = "sessions"

    sid: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expire: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_sessions_expire", "expire"),
    )

    def __repr__(self) -> str:
        return f"<UserSession(sid={self.sid}, user_id={self.user_id})>"
