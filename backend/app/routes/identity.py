"""
NotaryPro Backend — Identity Verification Route
=================================================

What:  POST /api/verify-identity. A failed check answers 200 with
       verified=false; only access and state problems are errors.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.document import (
    DocumentResponse,
    IdentityVerificationRequest,
    IdentityVerificationResponse,
)
from app.security import get_current_user
from app.services.workflow_service import CertificationWorkflow, get_certification_workflow

router = APIRouter(prefix="/api", tags=["Identity"])


@router.post(
    "/verify-identity",
    response_model=IdentityVerificationResponse,
    responses={
        403: {"description": "Neither the submitter nor the assigned certifier", "model": ErrorResponse},
        404: {"description": "Document not found", "model": ErrorResponse},
        409: {"description": "Document is not awaiting verification", "model": ErrorResponse},
    },
    summary="Verify the submitter's identity for a document",
)
async def verify_identity(
    body: IdentityVerificationRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    workflow: CertificationWorkflow = Depends(get_certification_workflow),
) -> IdentityVerificationResponse:
    outcome = await workflow.verify_identity(
        db, user, body.document_id, body.rut, body.first_name, body.last_name
    )
    return IdentityVerificationResponse(
        verified=outcome.verified,
        message=outcome.message,
        document=DocumentResponse.model_validate(outcome.document),
    )
