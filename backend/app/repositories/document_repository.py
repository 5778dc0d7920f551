"""
NotaryPro Backend — Document Repository
=========================================

What:  Data access for the `documents` table.
Who:   DocumentService and CertificationWorkflow.

Guarded Transitions:
    transition() is the only way document status changes. It issues

        UPDATE documents SET status = :to, ...
        WHERE id = :id AND status IN (:from_statuses)

    and reports whether a row matched. Two concurrent certify calls on the
    same document both pass their in-memory checks, but only one UPDATE
    matches 'pending_certification'; the other sees zero rows and the
    workflow answers StateConflictError. No explicit locks are taken.

QR Validation Codes:
    QR<epoch milliseconds><9 random base36 characters>, e.g.
    QR1718049600123k3j9x0a1b. 36^9 ≈ 10^14 combinations per millisecond; the
    unique constraint on the column backs it up.
"""

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.document import Document
from app.models.enums import DocumentStatus
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase

# Statuses a certifier sees in their own list
CERTIFIER_VISIBLE_STATUSES = (
    DocumentStatus.PENDING_CERTIFICATION,
    DocumentStatus.CERTIFIED,
    DocumentStatus.REJECTED,
)


def generate_qr_code() -> str:
    """Globally unique validation token for a new document."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"QR{int(time.time() * 1000)}{suffix}"


class DocumentRepository(BaseRepository[Document]):
    model = Document

    async def create(self, db: AsyncSession, **fields: Any) -> Document:
        """
        Insert a document. The QR validation code is always generated here;
        a caller-supplied code is ignored.
        """
        fields["qr_validation_code"] = generate_qr_code()
        document = await self.add(db, Document(**fields))
        logger.debug(
            "Document %s created (status=%s, qr=%s)",
            document.id,
            document.status.value,
            document.qr_validation_code,
        )
        return document

    async def get_by_qr_code(self, db: AsyncSession, code: str) -> Optional[Document]:
        result = await db.execute(
            select(Document).where(Document.qr_validation_code == code)
        )
        return result.scalar_one_or_none()

    async def list_by_submitter(self, db: AsyncSession, submitter_id: str) -> List[Document]:
        result = await db.execute(
            select(Document)
            .where(Document.submitter_id == submitter_id)
            .order_by(desc(Document.created_at), desc(Document.id))
        )
        return list(result.scalars().all())

    async def list_by_certificador(self, db: AsyncSession, certificador_id: str) -> List[Document]:
        """Documents assigned to a certifier that reached the certification stage."""
        result = await db.execute(
            select(Document)
            .where(
                Document.certificador_id == certificador_id,
                Document.status.in_(CERTIFIER_VISIBLE_STATUSES),
            )
            .order_by(desc(Document.created_at), desc(Document.id))
        )
        return list(result.scalars().all())

    async def list_by_status(self, db: AsyncSession, status: DocumentStatus) -> List[Document]:
        result = await db.execute(
            select(Document)
            .where(Document.status == status)
            .order_by(desc(Document.created_at), desc(Document.id))
        )
        return list(result.scalars().all())

    async def transition(
        self,
        db: AsyncSession,
        document_id: int,
        from_statuses: Iterable[DocumentStatus],
        to_status: DocumentStatus,
        **fields: Any,
    ) -> bool:
        """
        Atomically set status and merge `fields`, only if the row is
        currently in one of `from_statuses`.

        Stamps updated_at, and certified_at when moving to 'certified'.

        Returns:
            True if the row was updated, False if it was not in an allowed
            source status (or does not exist).
        """
        now = datetime.now(timezone.utc)
        values: Dict[str, Any] = dict(fields)
        values["status"] = to_status
        values["updated_at"] = now
        if to_status == DocumentStatus.CERTIFIED:
            values.setdefault("certified_at", now)

        stmt = (
            update(Document)
            .where(
                Document.id == document_id,
                Document.status.in_(list(from_statuses)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def count_by_status(self, db: AsyncSession) -> Dict[DocumentStatus, int]:
        """Document count per status; statuses with no rows report 0."""
        result = await db.execute(
            select(Document.status, func.count(Document.id)).group_by(Document.status)
        )
        counts = {status: 0 for status in DocumentStatus}
        for status, count in result.all():
            counts[DocumentStatus(status)] = count
        return counts
