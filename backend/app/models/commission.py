"""
NotaryPro Backend — Commission SQLAlchemy Model
=================================================

What:  ORM model for the `commissions` table: the revenue split of one
       certified document.

Invariants:
    - vecino_amount + certificador_amount + admin_amount == total_amount
    - total_amount == document.price
    - At most one row per document (unique document_id). Rows are never
      updated apart from the is_paid flag.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Commission(Base):
    __tablename__ = "commissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id"), nullable=False, unique=True
    )
    vecino_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True
    )
    certificador_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True
    )

    vecino_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    certificador_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    admin_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_commissions_is_paid", "is_paid"),
    )

    def __repr__(self) -> str:
        return (
            f"<Commission(id={self.id}, document_id={self.document_id}, "
            f"total={self.total_amount}, paid={self.is_paid})>"
        )
