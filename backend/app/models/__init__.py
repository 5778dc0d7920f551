# Models package init
"""
Importing this package registers every table on Base.metadata, which
Alembic autogenerate and the test fixtures (create_all) rely on.
"""

from app.models.commission import Commission
from app.models.document import Document
from app.models.enums import DocumentStatus, DocumentType, NotificationType, UserRole
from app.models.notification import Notification
from app.models.pos_location import PosLocation
from app.models.user import User, UserSession

__all__ = [
    "Commission",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "Notification",
    "NotificationType",
    "PosLocation",
    "User",
    "UserSession",
    "UserRole",
]
