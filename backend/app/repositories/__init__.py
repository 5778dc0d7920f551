# Repositories package init
"""
NotaryPro Backend — Repository Layer
======================================

What:  Typed async data access, one repository per table.
How:   Repositories are stateless; every method receives the request's
       AsyncSession, so all writes of one request share one transaction.
       They never commit; get_db_session owns the transaction boundary.

Repository Inventory:
    - UserRepository, SessionRepository: identities and issued tokens
    - DocumentRepository: documents, QR codes, guarded status transitions
    - PosLocationRepository: submission points
    - CommissionRepository: revenue splits and payout state
    - NotificationRepository: user inbox
"""

from app.repositories.commission_repository import CommissionRepository
from app.repositories.document_repository import DocumentRepository, generate_qr_code
from app.repositories.notification_repository import NotificationRepository
from app.repositories.pos_location_repository import PosLocationRepository
from app.repositories.user_repository import SessionRepository, UserRepository

__all__ = [
    "CommissionRepository",
    "DocumentRepository",
    "NotificationRepository",
    "PosLocationRepository",
    "SessionRepository",
    "UserRepository",
    "generate_qr_code",
]
