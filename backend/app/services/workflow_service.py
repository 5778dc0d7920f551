"""
NotaryPro Backend — Certification Workflow
============================================

What:  The document lifecycle state machine and the side effects of each
       step: identity stamping, signatures, commission settlement and
       notifications.
How:   Every status change goes through _guarded_transition(), which checks
       the transition table and then issues DocumentRepository.transition()
       (a conditional UPDATE). Repositories, the notifier and the identity
       verifier are injected through the constructor so tests can swap any
       of them.
Who:   Documents and identity routes.

Transition Table:
    draft                  → pending_verification   (submit)
    pending_verification   → pending_certification  (verify_identity)
    pending_certification  → certified              (certify)
    pending_certification  → rejected               (reject)
    draft | pending_verification | pending_certification → cancelled (cancel)

    Anything else is refused with StateConflictError. certified, rejected
    and cancelled have no outgoing edges.

Check Order (certify / reject):
    1. Role: caller must be a certificador (AuthorizationError otherwise,
       whatever the document's state, even if it does not exist)
    2. Existence (NotFoundError)
    3. Assignment: a document assigned to another certifier is off limits;
       an unassigned one is claimed by the caller
    4. State: must be pending_certification (StateConflictError)
"""

import logging
import time
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from app.models.commission import Commission
from app.models.document import Document
from app.models.enums import DocumentStatus, UserRole
from app.models.user import User
from app.repositories.commission_repository import CommissionRepository
from app.repositories.document_repository import DocumentRepository
from app.repositories.pos_location_repository import PosLocationRepository
from app.repositories.user_repository import UserRepository
from app.security import HasRole, OwnerOrRole
from app.services.commission_service import compute_split, resolve_vecino_id
from app.services.identity_service import IdentityVerifier, identity_verifier
from app.services.notification_service import NotificationService, notification_service

logger = logging.getLogger(__name__)

S = DocumentStatus

SUBMITTER_OR_CERTIFIER = OwnerOrRole(UserRole.CERTIFICADOR)

_TRANSITIONS: FrozenSet[Tuple[DocumentStatus, DocumentStatus]] = frozenset({
    (S.DRAFT, S.PENDING_VERIFICATION),
    (S.PENDING_VERIFICATION, S.PENDING_CERTIFICATION),
    (S.PENDING_CERTIFICATION, S.CERTIFIED),
    (S.PENDING_CERTIFICATION, S.REJECTED),
    (S.DRAFT, S.CANCELLED),
    (S.PENDING_VERIFICATION, S.CANCELLED),
    (S.PENDING_CERTIFICATION, S.CANCELLED),
})


def is_allowed(from_status: DocumentStatus, to_status: DocumentStatus) -> bool:
    return (from_status, to_status) in _TRANSITIONS


def sources_for(to_status: DocumentStatus) -> Set[DocumentStatus]:
    """Statuses with an edge into `to_status`."""
    return {src for src, dst in _TRANSITIONS if dst == to_status}


def default_signature(certificador_id: str) -> str:
    return f"CERT_{int(time.time() * 1000)}_{certificador_id}"


@dataclass
class WorkflowResult:
    """
    Outcome of a workflow step.

    warnings lists notifications that could not be delivered; the step
    itself succeeded.
    """
    document: Document
    commission: Optional[Commission] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class IdentityOutcome:
    document: Document
    verified: bool
    message: str


class CertificationWorkflow:
    def __init__(
        self,
        documents: Optional[DocumentRepository] = None,
        commissions: Optional[CommissionRepository] = None,
        pos_locations: Optional[PosLocationRepository] = None,
        notifier: Optional[NotificationService] = None,
        verifier: Optional[IdentityVerifier] = None,
        users: Optional[UserRepository] = None,
    ):
        self.documents = documents or DocumentRepository()
        self.commissions = commissions or CommissionRepository()
        self.pos_locations = pos_locations or PosLocationRepository()
        self.notifier = notifier or notification_service
        self.verifier = verifier or identity_verifier
        self.users = users or UserRepository()

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, document_id: int) -> Document:
        document = await self.documents.get(db, document_id)
        if document is None:
            raise NotFoundError(resource="document", resource_id=str(document_id))
        return document

    async def _guarded_transition(
        self,
        db: AsyncSession,
        document: Document,
        to_status: DocumentStatus,
        **fields,
    ) -> None:
        """
        Move `document` to `to_status` or raise StateConflictError.

        The in-memory check gives a precise message; the conditional UPDATE
        catches a concurrent change made after the document was loaded.
        """
        current = document.status
        if not is_allowed(current, to_status):
            raise StateConflictError(
                message=(
                    f"Document {document.id} is '{current.value}' and cannot move "
                    f"to '{to_status.value}'"
                ),
                current_state=current.value,
                context={"document_id": document.id, "target": to_status.value},
            )

        updated = await self.documents.transition(
            db, document.id, sources_for(to_status), to_status, **fields
        )
        if not updated:
            await db.refresh(document)
            raise StateConflictError(
                message=(
                    f"Document {document.id} changed to '{document.status.value}' "
                    f"while this request was in progress"
                ),
                current_state=document.status.value,
                context={"document_id": document.id, "target": to_status.value},
            )

        await db.refresh(document)
        logger.info(
            "Document %s: %s → %s", document.id, current.value, to_status.value
        )

    async def _notify(
        self,
        db: AsyncSession,
        warnings: List[str],
        user_id: str,
        title: str,
        message: str,
    ) -> None:
        delivered = await self.notifier.dispatch(db, user_id, title, message)
        if delivered is None:
            warnings.append(f"Notification '{title}' to user {user_id} could not be delivered")

    def _check_assignment(self, document: Document, actor: User) -> None:
        if document.certificador_id and document.certificador_id != actor.id:
            raise AuthorizationError(
                message="This document is assigned to another certifier",
                context={"document_id": document.id, "user_id": actor.id},
            )

    # ── Operations ────────────────────────────────────────────────────────

    async def submit(self, db: AsyncSession, actor: User, document_id: int) -> WorkflowResult:
        """draft → pending_verification, by the submitter."""
        document = await self._load(db, document_id)
        OwnerOrRole().check(actor, owner_id=document.submitter_id)
        await self._guarded_transition(db, document, S.PENDING_VERIFICATION)
        return WorkflowResult(document=document)

    async def verify_identity(
        self,
        db: AsyncSession,
        actor: User,
        document_id: int,
        rut: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> IdentityOutcome:
        """
        Run the identity check for the submitter of `document_id`.

        The submitter runs it, or a certificador on their behalf (the
        document must be assigned to them or to nobody). The RUT is always
        matched against the submitter.

        A failed check is not an error: nothing changes and the outcome
        carries verified=False with the reason.
        """
        document = await self._load(db, document_id)
        SUBMITTER_OR_CERTIFIER.check(actor, owner_id=document.submitter_id)
        acting_for_submitter = actor.id != document.submitter_id
        if acting_for_submitter:
            self._check_assignment(document, actor)

        if document.status != S.PENDING_VERIFICATION:
            raise StateConflictError(
                message=f"Document {document.id} is not awaiting identity verification",
                current_state=document.status.value,
            )

        submitter = actor
        if acting_for_submitter:
            submitter = await self.users.get(db, document.submitter_id)
        result = await self.verifier.verify(submitter, rut, first_name, last_name)
        if not result.verified:
            return IdentityOutcome(document=document, verified=False, message=result.reason)

        await self._guarded_transition(
            db,
            document,
            S.PENDING_CERTIFICATION,
            is_identity_verified=True,
            verification_data=result.data,
        )
        return IdentityOutcome(
            document=document,
            verified=True,
            message="Identity verified. The document is now awaiting certification.",
        )

    async def certify(
        self,
        db: AsyncSession,
        actor: User,
        document_id: int,
        digital_signature: Optional[str] = None,
    ) -> WorkflowResult:
        """
        pending_certification → certified, settling the commission.

        Raises:
            AuthorizationError: caller is not a certificador, or the
                document belongs to another certifier
            NotFoundError: unknown document
            StateConflictError: document is not pending certification
                (including a second certify of the same document)
        """
        HasRole(UserRole.CERTIFICADOR).check(actor)
        document = await self._load(db, document_id)
        self._check_assignment(document, actor)

        signature = (digital_signature or "").strip() or default_signature(actor.id)
        await self._guarded_transition(
            db,
            document,
            S.CERTIFIED,
            digital_signature=signature,
            certificador_id=actor.id,
        )

        pos_location = None
        if document.pos_location_id is not None:
            pos_location = await self.pos_locations.get(db, document.pos_location_id)

        split = compute_split(document.price)
        commission = await self.commissions.create(
            db,
            document_id=document.id,
            vecino_id=resolve_vecino_id(document, pos_location),
            certificador_id=actor.id,
            vecino_amount=split.vecino_amount,
            certificador_amount=split.certificador_amount,
            admin_amount=split.admin_amount,
            total_amount=split.total_amount,
        )
        logger.info(
            "Commission %s settled for document %s: vecino=%s certificador=%s admin=%s",
            commission.id,
            document.id,
            split.vecino_amount,
            split.certificador_amount,
            split.admin_amount,
        )

        warnings: List[str] = []
        await self._notify(
            db,
            warnings,
            document.submitter_id,
            "Document certified",
            f"Your document '{document.title}' has been certified. "
            f"Validation code: {document.qr_validation_code}",
        )
        return WorkflowResult(document=document, commission=commission, warnings=warnings)

    async def reject(
        self,
        db: AsyncSession,
        actor: User,
        document_id: int,
        reason: Optional[str],
    ) -> WorkflowResult:
        """pending_certification → rejected. A non-blank reason is required."""
        HasRole(UserRole.CERTIFICADOR).check(actor)

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                message="A rejection reason is required",
                field="rejection_reason",
            )

        document = await self._load(db, document_id)
        self._check_assignment(document, actor)

        await self._guarded_transition(
            db,
            document,
            S.REJECTED,
            rejection_reason=reason,
            certificador_id=actor.id,
        )

        warnings: List[str] = []
        await self._notify(
            db,
            warnings,
            document.submitter_id,
            "Document rejected",
            f"Your document '{document.title}' was rejected. Reason: {reason}",
        )
        return WorkflowResult(document=document, warnings=warnings)

    async def cancel(self, db: AsyncSession, actor: User, document_id: int) -> WorkflowResult:
        """Any non-terminal status → cancelled, by the submitter or a superadmin."""
        document = await self._load(db, document_id)
        OwnerOrRole(UserRole.SUPERADMIN).check(actor, owner_id=document.submitter_id)
        await self._guarded_transition(db, document, S.CANCELLED)
        return WorkflowResult(document=document)


# ── Singleton Instance ────────────────────────────────────────────────────
certification_workflow = CertificationWorkflow()


def get_certification_workflow() -> CertificationWorkflow:
    """FastAPI dependency; override in tests to inject fakes."""
    return certification_workflow
