"""
NotaryPro Backend — Document Schemas
======================================

What:  Request/response models for document submission, the certification
       action, identity verification, and public QR validation.
How:   Input models validate shape and simple rules before anything reaches
       the workflow; business rules (roles, states) are enforced in services.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.enums import DocumentStatus, DocumentType
from app.schemas.commission import CommissionResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentCreateRequest(BaseModel):
    """
    Body of POST /api/documents. The submitter is always the caller.

    save_as_draft: keep the document in 'draft' until submitted explicitly;
    otherwise it starts in 'pending_verification'.
    """
    type: DocumentType
    title: str = Field(min_length=1, max_length=255)
    content: Dict[str, Any] = Field(default_factory=dict)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    certificador_id: Optional[str] = Field(default=None, max_length=64)
    pos_location_id: Optional[int] = Field(default=None, ge=1)
    save_as_draft: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class CertificationAction(str, Enum):
    CERTIFY = "certify"
    REJECT = "reject"


class CertificationRequest(BaseModel):
    """
    Body of PATCH /api/documents/{id}/certify.

    rejection_reason is checked by the workflow (not here) so that a missing
    reason surfaces as a ValidationError with a 400, consistently with the
    other business rules.
    """
    action: CertificationAction
    digital_signature: Optional[str] = Field(default=None, max_length=4096)
    rejection_reason: Optional[str] = Field(default=None, max_length=2000)


class IdentityVerificationRequest(BaseModel):
    """Body of POST /api/verify-identity."""
    document_id: int = Field(ge=1)
    rut: str = Field(min_length=3, max_length=12, description="Chilean RUT, e.g. 12.345.678-5")
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentResponse(BaseModel):
    id: int
    type: DocumentType
    status: DocumentStatus
    title: str
    content: Dict[str, Any]
    submitter_id: str
    certificador_id: Optional[str] = None
    pos_location_id: Optional[int] = None
    price: Decimal
    is_identity_verified: bool
    digital_signature: Optional[str] = None
    rejection_reason: Optional[str] = None
    qr_validation_code: str
    created_at: datetime
    updated_at: datetime
    certified_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DocumentActionResponse(BaseModel):
    """
    Result of a workflow step that may dispatch notifications.

    warnings: notification deliveries that failed. The transition itself
    was committed; these are reported so the caller can follow up.
    """
    document: DocumentResponse
    commission: Optional[CommissionResponse] = None
    warnings: List[str] = Field(default_factory=list)


class IdentityVerificationResponse(BaseModel):
    verified: bool
    message: str
    document: DocumentResponse


class DocumentValidationResponse(BaseModel):
    """Public view of a document looked up by QR code. No content, no prices."""
    valid: bool
    document_id: int
    type: DocumentType
    title: str
    status: DocumentStatus
    certified_at: Optional[datetime] = None
    digital_signature: Optional[str] = None
