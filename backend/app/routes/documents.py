"""
NotaryPro Backend — Document Route Handlers
=============================================

What:  Document submission, listings, detail, and the lifecycle actions
       (submit, cancel, certify/reject), plus public QR validation.
How:   Thin handlers: parse the body, call DocumentService or
       CertificationWorkflow, shape the response. Role and ownership
       rules live in the services.

Route Order:
    /documents/pending and /documents/validate/{qr_code} are declared
    before /documents/{document_id} so they are not captured by it.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.user import User
from app.schemas.commission import CommissionResponse
from app.schemas.common import ErrorResponse
from app.schemas.document import (
    CertificationAction,
    CertificationRequest,
    DocumentActionResponse,
    DocumentCreateRequest,
    DocumentResponse,
    DocumentValidationResponse,
)
from app.security import get_current_user, require_certifier
from app.services.document_service import document_service
from app.services.workflow_service import (
    CertificationWorkflow,
    WorkflowResult,
    get_certification_workflow,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])

_ERRORS = {
    400: {"description": "Business rule violated", "model": ErrorResponse},
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Wrong role or not the owner", "model": ErrorResponse},
    404: {"description": "Document not found", "model": ErrorResponse},
    409: {"description": "Document is not in a state that allows this", "model": ErrorResponse},
}


def _action_response(result: WorkflowResult) -> DocumentActionResponse:
    return DocumentActionResponse(
        document=DocumentResponse.model_validate(result.document),
        commission=(
            CommissionResponse.model_validate(result.commission)
            if result.commission is not None
            else None
        ),
        warnings=result.warnings,
    )


@router.post(
    "",
    response_model=DocumentActionResponse,
    responses=_ERRORS,
    summary="Submit a new document",
)
async def create_document(
    body: DocumentCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentActionResponse:
    document, warnings = await document_service.create(db, user, body)
    return DocumentActionResponse(
        document=DocumentResponse.model_validate(document),
        warnings=warnings,
    )


@router.get(
    "",
    response_model=List[DocumentResponse],
    summary="List documents visible to the caller",
    description=(
        "Certifiers get the documents assigned to them that reached the "
        "certification stage; everyone else gets their own submissions."
    ),
)
async def list_documents(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    documents = await document_service.list_for_user(db, user)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get(
    "/pending",
    response_model=List[DocumentResponse],
    summary="Certification queue",
)
async def list_pending(
    user: User = Depends(require_certifier),
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    documents = await document_service.list_pending(db, user)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get(
    "/validate/{qr_code}",
    response_model=DocumentValidationResponse,
    responses={404: {"description": "Unknown validation code", "model": ErrorResponse}},
    summary="Public validation of a certificate by QR code",
)
async def validate_document(
    qr_code: str,
    db: AsyncSession = Depends(get_db_session),
) -> DocumentValidationResponse:
    return await document_service.validate_qr(db, qr_code)


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    responses=_ERRORS,
    summary="Document detail",
)
async def get_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    document = await document_service.get(db, user, document_id)
    return DocumentResponse.model_validate(document)


@router.post(
    "/{document_id}/submit",
    response_model=DocumentActionResponse,
    responses=_ERRORS,
    summary="Move a draft to identity verification",
)
async def submit_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    workflow: CertificationWorkflow = Depends(get_certification_workflow),
) -> DocumentActionResponse:
    return _action_response(await workflow.submit(db, user, document_id))


@router.post(
    "/{document_id}/cancel",
    response_model=DocumentActionResponse,
    responses=_ERRORS,
    summary="Cancel a document that has not reached a final state",
)
async def cancel_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    workflow: CertificationWorkflow = Depends(get_certification_workflow),
) -> DocumentActionResponse:
    return _action_response(await workflow.cancel(db, user, document_id))


@router.patch(
    "/{document_id}/certify",
    response_model=DocumentActionResponse,
    responses=_ERRORS,
    summary="Certify or reject a document",
    description=(
        "action=certify settles the commission and notifies the submitter. "
        "action=reject requires rejection_reason."
    ),
)
async def certify_document(
    document_id: int,
    body: CertificationRequest,
    user: User = Depends(require_certifier),
    db: AsyncSession = Depends(get_db_session),
    workflow: CertificationWorkflow = Depends(get_certification_workflow),
) -> DocumentActionResponse:
    if body.action == CertificationAction.CERTIFY:
        result = await workflow.certify(db, user, document_id, body.digital_signature)
    else:
        result = await workflow.reject(db, user, document_id, body.rejection_reason)
    return _action_response(result)
