"""
NotaryPro Backend — Document Service
======================================

What:  Document creation, retrieval with access checks, the per-role
       listings, and public QR validation.
How:   Status changes after creation belong to CertificationWorkflow; this
       service only inserts documents and reads them.
Who:   Documents routes.

Visibility:
    submitter        → own documents
    certificador     → documents assigned to them, and unassigned ones once
                       they reach pending_certification
    superadmin       → everything
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.document import Document
from app.models.enums import DocumentStatus, UserRole
from app.models.user import User
from app.repositories.document_repository import CERTIFIER_VISIBLE_STATUSES, DocumentRepository
from app.repositories.pos_location_repository import PosLocationRepository
from app.repositories.user_repository import UserRepository
from app.schemas.document import DocumentCreateRequest, DocumentValidationResponse
from app.security import HasRole, OwnerOrRole
from app.services.notification_service import NotificationService, notification_service

logger = logging.getLogger(__name__)

VIEWER = OwnerOrRole(UserRole.CERTIFICADOR, UserRole.SUPERADMIN)
IS_CERTIFIER = HasRole(UserRole.CERTIFICADOR)
IS_SUPERADMIN = HasRole(UserRole.SUPERADMIN)


class DocumentService:
    def __init__(
        self,
        documents: Optional[DocumentRepository] = None,
        users: Optional[UserRepository] = None,
        pos_locations: Optional[PosLocationRepository] = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.documents = documents or DocumentRepository()
        self.users = users or UserRepository()
        self.pos_locations = pos_locations or PosLocationRepository()
        self.notifier = notifier or notification_service

    async def create(
        self, db: AsyncSession, submitter: User, request: DocumentCreateRequest
    ) -> Tuple[Document, List[str]]:
        """
        Insert a new document for `submitter`.

        Returns:
            (document, warnings). warnings is non-empty when the assigned
            certifier could not be notified.

        Raises:
            ValidationError: the certifier is unknown, inactive or not a
                certificador; the POS location is unknown or inactive
        """
        if request.certificador_id is not None:
            certifier = await self.users.get(db, request.certificador_id)
            if not IS_CERTIFIER.allows(certifier):
                raise ValidationError(
                    message="certificador_id does not refer to an active certifier",
                    field="certificador_id",
                )

        if request.pos_location_id is not None:
            location = await self.pos_locations.get(db, request.pos_location_id)
            if location is None or not location.is_active:
                raise ValidationError(
                    message="pos_location_id does not refer to an active POS location",
                    field="pos_location_id",
                )

        status = (
            DocumentStatus.DRAFT if request.save_as_draft else DocumentStatus.PENDING_VERIFICATION
        )
        document = await self.documents.create(
            db,
            type=request.type,
            status=status,
            title=request.title,
            content=request.content,
            price=request.price,
            submitter_id=submitter.id,
            certificador_id=request.certificador_id,
            pos_location_id=request.pos_location_id,
        )
        logger.info(
            "Document %s created by %s (type=%s, status=%s)",
            document.id,
            submitter.id,
            document.type.value,
            document.status.value,
        )

        warnings: List[str] = []
        if document.certificador_id:
            delivered = await self.notifier.dispatch(
                db,
                document.certificador_id,
                "New document assigned",
                f"Document '{document.title}' has been assigned to you for certification.",
            )
            if delivered is None:
                warnings.append(
                    f"Notification to certifier {document.certificador_id} could not be delivered"
                )
        return document, warnings

    async def get(self, db: AsyncSession, user: User, document_id: int) -> Document:
        """
        Raises:
            NotFoundError: unknown document
            AuthorizationError: caller may not see it
        """
        document = await self.documents.get(db, document_id)
        if document is None:
            raise NotFoundError(resource="document", resource_id=str(document_id))

        if not self._can_view(user, document):
            raise AuthorizationError(
                message="You do not have access to this document",
                context={"document_id": document_id, "user_id": user.id},
            )
        return document

    @staticmethod
    def _can_view(user: User, document: Document) -> bool:
        if not VIEWER.allows(user, owner_id=document.submitter_id):
            return False
        if document.submitter_id == user.id or IS_SUPERADMIN.allows(user):
            return True
        # Certifier: own assignments in any state, unassigned ones once queued
        if document.certificador_id == user.id:
            return True
        return document.certificador_id is None and document.status in CERTIFIER_VISIBLE_STATUSES

    async def list_for_user(self, db: AsyncSession, user: User) -> List[Document]:
        if IS_CERTIFIER.allows(user):
            return await self.documents.list_by_certificador(db, user.id)
        return await self.documents.list_by_submitter(db, user.id)

    async def list_pending(self, db: AsyncSession, certifier: User) -> List[Document]:
        """Certification queue: pending documents assigned to `certifier` or to nobody."""
        pending = await self.documents.list_by_status(db, DocumentStatus.PENDING_CERTIFICATION)
        return [d for d in pending if d.certificador_id in (None, certifier.id)]

    async def validate_qr(self, db: AsyncSession, code: str) -> DocumentValidationResponse:
        """Public lookup by QR code. valid is True only for certified documents."""
        document = await self.documents.get_by_qr_code(db, code)
        if document is None:
            raise NotFoundError(resource="document", resource_id=code)

        return DocumentValidationResponse(
            valid=document.status == DocumentStatus.CERTIFIED,
            document_id=document.id,
            type=document.type,
            title=document.title,
            status=document.status,
            certified_at=document.certified_at,
            digital_signature=document.digital_signature,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
document_service = DocumentService()
