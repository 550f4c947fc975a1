# This project was developed with assistance from AI tools.
"""
Domain enums for the DealFlow deal pipeline.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class DealStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    NEEDS_INFO = "needs_info"
    UNDERWRITING = "underwriting"
    OFFER_PREPARED = "offer_prepared"
    OFFER_SENT = "offer_sent"
    IN_CONTRACT = "in_contract"
    FUNDING = "funding"
    CLOSED = "closed"
    REJECTED = "rejected"

    @classmethod
    def terminal_statuses(cls) -> frozenset["DealStatus"]:
        """Statuses where a deal is no longer active."""
        return frozenset({cls.CLOSED, cls.REJECTED})

    @classmethod
    def fundable_statuses(cls) -> frozenset["DealStatus"]:
        """Statuses in which investors may browse and request to fund a deal."""
        return frozenset({cls.OFFER_PREPARED, cls.OFFER_SENT, cls.IN_CONTRACT})

    @classmethod
    def valid_transitions(cls) -> dict["DealStatus", frozenset["DealStatus"]]:
        """Allowed status transitions in the deal pipeline."""
        return {
            cls.SUBMITTED: frozenset({cls.NEEDS_INFO, cls.UNDERWRITING, cls.REJECTED}),
            cls.NEEDS_INFO: frozenset({cls.SUBMITTED, cls.UNDERWRITING, cls.REJECTED}),
            cls.UNDERWRITING: frozenset({cls.NEEDS_INFO, cls.OFFER_PREPARED, cls.REJECTED}),
            cls.OFFER_PREPARED: frozenset({cls.OFFER_SENT, cls.UNDERWRITING, cls.REJECTED}),
            cls.OFFER_SENT: frozenset({cls.IN_CONTRACT, cls.OFFER_PREPARED, cls.REJECTED}),
            cls.IN_CONTRACT: frozenset({cls.FUNDING, cls.CLOSED, cls.REJECTED}),
            cls.FUNDING: frozenset({cls.CLOSED, cls.REJECTED}),
            cls.CLOSED: frozenset(),
            cls.REJECTED: frozenset(),
        }

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS: dict[DealStatus, str] = {
    DealStatus.SUBMITTED: "Submitted",
    DealStatus.NEEDS_INFO: "Needs Info",
    DealStatus.UNDERWRITING: "Underwriting",
    DealStatus.OFFER_PREPARED: "Offer Prepared",
    DealStatus.OFFER_SENT: "Offer Sent",
    DealStatus.IN_CONTRACT: "In Contract",
    DealStatus.FUNDING: "Funding",
    DealStatus.CLOSED: "Closed",
    DealStatus.REJECTED: "Rejected",
}


class UserRole(str, enum.Enum):
    AGENT = "agent"
    UNDERWRITER = "underwriter"
    ADMIN = "admin"
    INVESTOR = "investor"


class DealPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PropertyType(str, enum.Enum):
    SINGLE_FAMILY = "single_family"
    MULTI_FAMILY = "multi_family"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    DUPLEX = "duplex"
    TRIPLEX = "triplex"
    FOURPLEX = "fourplex"
    LAND = "land"
    COMMERCIAL = "commercial"
    OTHER = "other"


class UnderwritingStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def valid_transitions(cls) -> dict["UnderwritingStatus", frozenset["UnderwritingStatus"]]:
        return {
            cls.DRAFT: frozenset({cls.SUBMITTED}),
            cls.SUBMITTED: frozenset({cls.APPROVED, cls.REJECTED, cls.DRAFT}),
            cls.APPROVED: frozenset(),
            cls.REJECTED: frozenset({cls.DRAFT}),
        }


class ArvSource(str, enum.Enum):
    COMPS = "comps"
    APPRAISAL = "appraisal"
    ESTIMATE = "estimate"


class RepairScope(str, enum.Enum):
    COSMETIC = "cosmetic"
    MODERATE = "moderate"
    EXTENSIVE = "extensive"
    GUT = "gut"


class FinancingType(str, enum.Enum):
    CASH = "cash"
    HARD_MONEY = "hard_money"
    CONVENTIONAL = "conventional"
    PRIVATE = "private"


class FundingStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    FUNDED = "funded"
    DECLINED = "declined"
    WITHDRAWN = "withdrawn"

    @classmethod
    def terminal_statuses(cls) -> frozenset["FundingStatus"]:
        return frozenset({cls.FUNDED, cls.DECLINED, cls.WITHDRAWN})

    @classmethod
    def valid_transitions(cls) -> dict["FundingStatus", frozenset["FundingStatus"]]:
        """Reviewer-driven transitions. Withdrawal is handled separately by the investor."""
        return {
            cls.PENDING: frozenset({cls.UNDER_REVIEW, cls.APPROVED, cls.DECLINED}),
            cls.UNDER_REVIEW: frozenset({cls.APPROVED, cls.DECLINED}),
            cls.APPROVED: frozenset({cls.FUNDED, cls.DECLINED}),
            cls.FUNDED: frozenset(),
            cls.DECLINED: frozenset(),
            cls.WITHDRAWN: frozenset(),
        }


class AttachmentCategory(str, enum.Enum):
    PHOTO = "photo"
    CONTRACT = "contract"
    INSPECTION = "inspection"
    APPRAISAL = "appraisal"
    TITLE = "title"
    INSURANCE = "insurance"
    CLOSING = "closing"
    OTHER = "other"


class NotificationType(str, enum.Enum):
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    COMMENT = "comment"
    NEW_DEAL = "new_deal"
    FUNDING_REQUEST = "funding_request"
    FUNDING_UPDATE = "funding_update"


class AuditAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    LOGIN = "login"
    LOGOUT = "logout"
    BULK_UPDATE = "bulk_update"
    BULK_ASSIGN = "bulk_assign"
    BULK_DELETE = "bulk_delete"
    BULK_EXPORT = "bulk_export"
    FUNDING_REQUEST = "funding_request"
    FUNDING_APPROVAL = "funding_approval"
    FUNDING_REJECTION = "funding_rejection"


class EntityType(str, enum.Enum):
    DEAL = "deal"
    UNDERWRITING = "underwriting"
    USER = "user"
    COMMENT = "comment"
    ATTACHMENT = "attachment"
    SETTINGS = "settings"
    FUNDING = "funding"


class OfferDocumentStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    SIGNED = "signed"
    DECLINED = "declined"
    EXPIRED = "expired"


class ActivityType(str, enum.Enum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    UNDERWRITING_SAVED = "underwriting_saved"
    COMMENT_ADDED = "comment_added"
    ATTACHMENT_UPLOADED = "attachment_uploaded"
    OFFER_SENT = "offer_sent"
    FUNDING_REQUESTED = "funding_requested"
    FUNDING_UPDATED = "funding_updated"
    PRIORITY_CHANGED = "priority_changed"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
