# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).
"""

from db import (
    AuditLog,
    Deal,
    DemoDataManifest,
    InvestorFunding,
    OfferDocument,
    Profile,
    Property,
    UnderwritingRecord,
)
from db.database import engine
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with SQLADMIN_USER / SQLADMIN_PASSWORD.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if not settings.SQLADMIN_PASSWORD:
            return False
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class _ReadOnlyView(ModelView):
    can_create = False
    can_edit = False
    can_delete = False


class ProfileAdmin(_ReadOnlyView, model=Profile):
    column_list = [
        Profile.id,
        Profile.full_name,
        Profile.email,
        Profile.role,
        Profile.is_active,
        Profile.created_at,
    ]
    column_searchable_list = [Profile.full_name, Profile.email]
    column_sortable_list = [Profile.full_name, Profile.role, Profile.created_at]
    column_default_sort = [(Profile.created_at, True)]
    name = "Profile"
    name_plural = "Profiles"
    icon = "fa-solid fa-user"


class PropertyAdmin(_ReadOnlyView, model=Property):
    column_list = [
        Property.id,
        Property.address,
        Property.city,
        Property.state,
        Property.zip,
        Property.property_type,
    ]
    column_searchable_list = [Property.address, Property.city]
    column_sortable_list = [Property.id, Property.city, Property.state]
    name = "Property"
    name_plural = "Properties"
    icon = "fa-solid fa-house"


class DealAdmin(_ReadOnlyView, model=Deal):
    column_list = [
        Deal.id,
        Deal.deal_number,
        Deal.status,
        Deal.priority,
        Deal.asking_price,
        Deal.offer_price,
        Deal.agent_id,
        Deal.assigned_to,
        Deal.submitted_at,
    ]
    column_searchable_list = [Deal.deal_number, Deal.seller_name]
    column_sortable_list = [Deal.id, Deal.status, Deal.asking_price, Deal.submitted_at]
    column_default_sort = [(Deal.submitted_at, True)]
    name = "Deal"
    name_plural = "Deals"
    icon = "fa-solid fa-handshake"


class UnderwritingAdmin(_ReadOnlyView, model=UnderwritingRecord):
    column_list = [
        UnderwritingRecord.id,
        UnderwritingRecord.deal_id,
        UnderwritingRecord.status,
        UnderwritingRecord.version,
        UnderwritingRecord.arv,
        UnderwritingRecord.max_offer,
        UnderwritingRecord.risk_score,
        UnderwritingRecord.updated_at,
    ]
    column_sortable_list = [UnderwritingRecord.id, UnderwritingRecord.risk_score]
    column_default_sort = [(UnderwritingRecord.updated_at, True)]
    name = "Underwriting"
    name_plural = "Underwriting"
    icon = "fa-solid fa-calculator"


class InvestorFundingAdmin(_ReadOnlyView, model=InvestorFunding):
    column_list = [
        InvestorFunding.id,
        InvestorFunding.deal_id,
        InvestorFunding.investor_id,
        InvestorFunding.status,
        InvestorFunding.requested_amount,
        InvestorFunding.funded_amount,
        InvestorFunding.requested_at,
    ]
    column_sortable_list = [InvestorFunding.id, InvestorFunding.status, InvestorFunding.requested_at]
    column_default_sort = [(InvestorFunding.requested_at, True)]
    name = "Funding Request"
    name_plural = "Funding Requests"
    icon = "fa-solid fa-sack-dollar"


class OfferDocumentAdmin(_ReadOnlyView, model=OfferDocument):
    column_list = [
        OfferDocument.id,
        OfferDocument.deal_id,
        OfferDocument.offer_amount,
        OfferDocument.status,
        OfferDocument.docusign_envelope_id,
        OfferDocument.sent_at,
    ]
    column_default_sort = [(OfferDocument.created_at, True)]
    name = "Offer"
    name_plural = "Offers"
    icon = "fa-solid fa-file-signature"


class AuditLogAdmin(_ReadOnlyView, model=AuditLog):
    column_list = [
        AuditLog.id,
        AuditLog.created_at,
        AuditLog.action,
        AuditLog.entity_type,
        AuditLog.entity_id,
        AuditLog.user_id,
    ]
    column_sortable_list = [AuditLog.id, AuditLog.created_at, AuditLog.action]
    column_default_sort = [(AuditLog.id, True)]
    name = "Audit Log"
    name_plural = "Audit Logs"
    icon = "fa-solid fa-shield-alt"


class DemoDataManifestAdmin(_ReadOnlyView, model=DemoDataManifest):
    column_list = [DemoDataManifest.id, DemoDataManifest.seeded_at, DemoDataManifest.config_hash]
    name = "Seed Manifest"
    name_plural = "Seed Manifests"
    icon = "fa-solid fa-database"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="DealFlow Admin", authentication_backend=auth_backend)

    admin.add_view(DealAdmin)
    admin.add_view(PropertyAdmin)
    admin.add_view(UnderwritingAdmin)
    admin.add_view(InvestorFundingAdmin)
    admin.add_view(OfferDocumentAdmin)
    admin.add_view(ProfileAdmin)
    admin.add_view(AuditLogAdmin)
    admin.add_view(DemoDataManifestAdmin)

    return admin
