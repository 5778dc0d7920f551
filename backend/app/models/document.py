"""
NotaryPro Backend — Document SQLAlchemy Model
===============================================

What:  ORM model representing the `documents` table.
Who:   DocumentRepository for CRUD and conditional transitions; Alembic.

Table Design Rationale:
    - Integer primary key: documents are referenced by number in the UI
      and on printed certificates
    - status: lifecycle state; only changed through
      DocumentRepository.transition(), which guards the source state
    - price: NUMERIC(10, 2); every commission amount derives from it
    - qr_validation_code: unique token printed on the certificate and
      looked up by the public validation endpoint
    - digital_signature / rejection_reason / certified_at: written only by
      the certify / reject transitions

    Index on (status, created_at): serves the certifier queue
    ("pending_certification, newest first") and the analytics counts.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import DocumentStatus, DocumentType, enum_values


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """
    A document submitted for certification.

    Lifecycle:
        1. Created by a submitter (status = 'pending_verification', or 'draft')
        2. Identity verified by the submitter → 'pending_certification'
        3. Certified (commission settled) or rejected by a certifier
        4. Cancelled by the submitter while still non-terminal
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, name="document_type", values_callable=enum_values),
        nullable=False,
    )
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, name="document_status", values_callable=enum_values),
        nullable=False,
        default=DocumentStatus.DRAFT,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # ── Participants ──────────────────────────────────────────────────────
    submitter_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True
    )
    certificador_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=True, index=True
    )
    pos_location_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("pos_locations.id"), nullable=True
    )

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # ── Identity Verification ─────────────────────────────────────────────
    is_identity_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ── Outcome ───────────────────────────────────────────────────────────
    digital_signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    qr_validation_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    certified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_documents_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, status='{self.status.value}', price={self.price})>"
