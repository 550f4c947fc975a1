# This project was developed with assistance from AI tools.
"""
DealFlow -- domain models

Real-estate deal pipeline models covering profiles, properties, deals,
underwriting, attachments, comments, notifications, investor funding,
offer documents, and the audit trail.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ActivityType,
    AttachmentCategory,
    DealPriority,
    DealStatus,
    FundingStatus,
    NotificationType,
    OfferDocumentStatus,
    PropertyType,
    UnderwritingStatus,
    UserRole,
)


class Profile(Base):
    """User profile linked to the identity provider subject."""

    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False),
        nullable=False,
        default=UserRole.AGENT,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    notification_preferences = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Profile(id='{self.id}', role='{self.role}')>"


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)
    county = Column(String(100), nullable=True)
    property_type = Column(
        Enum(PropertyType, name="property_type", native_enum=False),
        nullable=False,
        default=PropertyType.SINGLE_FAMILY,
    )
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Float, nullable=True)
    sqft = Column(Integer, nullable=True)
    lot_size = Column(Integer, nullable=True)
    year_built = Column(Integer, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    deal = relationship("Deal", back_populates="property", uselist=False)

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.city}, {self.state} {self.zip}"

    def __repr__(self):
        return f"<Property(id={self.id}, address='{self.address}')>"


class Deal(Base):
    """A property transaction moving through the deal pipeline."""

    __tablename__ = "deals"
    __table_args__ = (
        CheckConstraint("asking_price >= 0", name="ck_deals_asking_price_nonneg"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_number = Column(String(32), nullable=True, unique=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, unique=True)
    agent_id = Column(String(255), ForeignKey("profiles.id"), nullable=False, index=True)
    assigned_to = Column(String(255), ForeignKey("profiles.id"), nullable=True, index=True)
    investor_id = Column(String(255), ForeignKey("profiles.id"), nullable=True, index=True)
    status = Column(
        Enum(DealStatus, name="deal_status", native_enum=False),
        nullable=False,
        default=DealStatus.SUBMITTED,
        index=True,
    )
    priority = Column(
        Enum(DealPriority, name="deal_priority", native_enum=False),
        nullable=False,
        default=DealPriority.MEDIUM,
    )
    asking_price = Column(Numeric(12, 2), nullable=True)
    offer_price = Column(Numeric(12, 2), nullable=True)
    final_price = Column(Numeric(12, 2), nullable=True)
    seller_name = Column(String(255), nullable=False)
    seller_phone = Column(String(50), nullable=True)
    seller_email = Column(String(255), nullable=True)
    seller_motivation = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    closed_at = Column(DateTime(timezone=True), nullable=True)

    property = relationship("Property", back_populates="deal", lazy="selectin")
    agent = relationship("Profile", foreign_keys=[agent_id])
    assignee = relationship("Profile", foreign_keys=[assigned_to])
    investor = relationship("Profile", foreign_keys=[investor_id])
    underwriting = relationship(
        "UnderwritingRecord", back_populates="deal", uselist=False, cascade="all, delete-orphan"
    )
    attachments = relationship("Attachment", back_populates="deal", cascade="all, delete-orphan")
    comments = relationship("DealComment", back_populates="deal", cascade="all, delete-orphan")
    funding_requests = relationship(
        "InvestorFunding", back_populates="deal", cascade="all, delete-orphan"
    )
    activities = relationship("DealActivity", back_populates="deal", cascade="all, delete-orphan")
    offer_documents = relationship(
        "OfferDocument", back_populates="deal", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Deal(id={self.id}, number='{self.deal_number}', status='{self.status}')>"


class UnderwritingRecord(Base):
    """Underwriter's evaluation of a deal. One record per deal, versioned on save."""

    __tablename__ = "underwriting_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, unique=True, index=True)
    underwriter_id = Column(String(255), ForeignKey("profiles.id"), nullable=False)
    arv = Column(Numeric(12, 2), nullable=True)
    repair_estimate = Column(Numeric(12, 2), nullable=True)
    max_offer = Column(Numeric(12, 2), nullable=True)
    recommended_offer = Column(Numeric(12, 2), nullable=True)
    profit_estimate = Column(Numeric(12, 2), nullable=True)
    inputs = Column(JSON, nullable=True)
    arv_comps = Column(JSON, nullable=True)
    repair_breakdown = Column(JSON, nullable=True)
    risk_score = Column(Integer, nullable=True)
    risk_factors = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(
        Enum(UnderwritingStatus, name="underwriting_status", native_enum=False),
        nullable=False,
        default=UnderwritingStatus.DRAFT,
    )
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    deal = relationship("Deal", back_populates="underwriting")

    def __repr__(self):
        return f"<UnderwritingRecord(deal_id={self.deal_id}, version={self.version})>"


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    uploaded_by = Column(String(255), ForeignKey("profiles.id"), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    category = Column(
        Enum(AttachmentCategory, name="attachment_category", native_enum=False),
        nullable=False,
        default=AttachmentCategory.OTHER,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    deal = relationship("Deal", back_populates="attachments")

    def __repr__(self):
        return f"<Attachment(id={self.id}, file='{self.file_name}')>"


class DealComment(Base):
    __tablename__ = "deal_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    user_id = Column(String(255), ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    deal = relationship("Deal", back_populates="comments")
    author = relationship("Profile", lazy="selectin")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), ForeignKey("profiles.id"), nullable=False, index=True)
    type = Column(
        Enum(NotificationType, name="notification_type", native_enum=False),
        nullable=False,
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    deal_id = Column(Integer, ForeignKey("deals.id", ondelete="SET NULL"), nullable=True)
    action_url = Column(String(500), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, user='{self.user_id}', type='{self.type}')>"


class AuditLog(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    prev_hash = Column(String(64), nullable=True)
    user_id = Column(String(255), nullable=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(255), nullable=True, index=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    extra = Column("metadata", JSON, nullable=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity='{self.entity_type}')>"


class InvestorFunding(Base):
    """An investor's request to fund a deal."""

    __tablename__ = "investor_funding"
    __table_args__ = (
        UniqueConstraint("deal_id", "investor_id", name="uq_investor_funding_deal_investor"),
        CheckConstraint("requested_amount >= 0", name="ck_investor_funding_amount_nonneg"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    investor_id = Column(String(255), ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(
        Enum(FundingStatus, name="funding_status", native_enum=False),
        nullable=False,
        default=FundingStatus.PENDING,
    )
    requested_amount = Column(Numeric(12, 2), nullable=False)
    approved_amount = Column(Numeric(12, 2), nullable=True)
    funded_amount = Column(Numeric(12, 2), nullable=True)
    interest_rate = Column(Float, nullable=True)
    term_months = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    requested_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    funded_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    deal = relationship("Deal", back_populates="funding_requests")
    investor = relationship("Profile")

    def __repr__(self):
        return f"<InvestorFunding(id={self.id}, deal={self.deal_id}, status='{self.status}')>"


class DealActivity(Base):
    __tablename__ = "deal_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=True)
    activity_type = Column(
        Enum(ActivityType, name="activity_type", native_enum=False),
        nullable=False,
    )
    description = Column(Text, nullable=False)
    extra = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    deal = relationship("Deal", back_populates="activities")


class OfferDocument(Base):
    """Purchase offer sent for e-signature."""

    __tablename__ = "offer_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    created_by = Column(String(255), ForeignKey("profiles.id"), nullable=False)
    offer_amount = Column(Numeric(12, 2), nullable=False)
    earnest_money = Column(Numeric(12, 2), nullable=True)
    closing_date = Column(DateTime(timezone=True), nullable=True)
    terms = Column(Text, nullable=True)
    status = Column(
        Enum(OfferDocumentStatus, name="offer_document_status", native_enum=False),
        nullable=False,
        default=OfferDocumentStatus.DRAFT,
    )
    docusign_envelope_id = Column(String(255), nullable=True, index=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    deal = relationship("Deal", back_populates="offer_documents")


class UserFormulaSettings(Base):
    """Per-user custom formula expressions."""

    __tablename__ = "user_formula_settings"

    user_id = Column(String(255), ForeignKey("profiles.id"), primary_key=True)
    mao_formula = Column(JSON, nullable=True)
    rule70_formula = Column(JSON, nullable=True)
    buy_box_formula = Column(JSON, nullable=True)
    custom_calculator = Column(JSON, nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class DemoDataManifest(Base):
    """Tracks demo data seeding for idempotency."""

    __tablename__ = "demo_data_manifest"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seeded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    config_hash = Column(String(64), nullable=False)
    summary = Column(Text, nullable=True)
