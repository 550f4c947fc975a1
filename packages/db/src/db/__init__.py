# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    ActivityType,
    AttachmentCategory,
    AuditAction,
    DealPriority,
    DealStatus,
    EntityType,
    FundingStatus,
    NotificationType,
    OfferDocumentStatus,
    PropertyType,
    UnderwritingStatus,
    UserRole,
)
from .models import (
    Attachment,
    AuditLog,
    Deal,
    DealActivity,
    DealComment,
    DemoDataManifest,
    InvestorFunding,
    Notification,
    OfferDocument,
    Profile,
    Property,
    UnderwritingRecord,
    UserFormulaSettings,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ActivityType",
    "AttachmentCategory",
    "AuditAction",
    "DealPriority",
    "DealStatus",
    "EntityType",
    "FundingStatus",
    "NotificationType",
    "OfferDocumentStatus",
    "PropertyType",
    "UnderwritingStatus",
    "UserRole",
    # Models
    "Attachment",
    "AuditLog",
    "Deal",
    "DealActivity",
    "DealComment",
    "DemoDataManifest",
    "InvestorFunding",
    "Notification",
    "OfferDocument",
    "Profile",
    "Property",
    "UnderwritingRecord",
    "UserFormulaSettings",
]
