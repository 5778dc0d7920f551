"""
NotaryPro Backend — Domain Enumerations
=========================================

What:  Fixed vocabularies shared by models, schemas, and services.
How:   `str` enums, so values serialize to JSON and compare against plain
       strings coming from the database or request bodies.
"""

import enum


class UserRole(str, enum.Enum):
    """Business classification of a user. Immutable once assigned."""

    SUPERADMIN = "superadmin"
    CERTIFICADOR = "certificador"
    VECINO = "vecino"
    USUARIO_FINAL = "usuario_final"
    SOCIOS = "socios"
    RRHH = "rrhh"


class DocumentType(str, enum.Enum):
    DECLARACION_JURADA = "declaracion_jurada"
    FINIQUITO_LABORAL = "finiquito_laboral"
    CONTRATO_SIMPLE = "contrato_simple"


class DocumentStatus(str, enum.Enum):
    """
    Document lifecycle states.

        draft → pending_verification → pending_certification → certified | rejected
        (any non-terminal state) → cancelled
    """

    DRAFT = "draft"
    PENDING_VERIFICATION = "pending_verification"
    PENDING_CERTIFICATION = "pending_certification"
    CERTIFIED = "certified"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {DocumentStatus.CERTIFIED, DocumentStatus.REJECTED, DocumentStatus.CANCELLED}
)


class NotificationType(str, enum.Enum):
    SYSTEM = "system"
    EMAIL = "email"
    WHATSAPP = "whatsapp"


def enum_values(enum_cls):
    """Column helper: persist enum values ('pending_certification'), not member names."""
    return [member.value for member in enum_cls]
