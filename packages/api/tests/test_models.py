# This project was developed with assistance from AI tools.
"""
Domain model structure tests
"""


def test_deal_relationships():
    """Deal model should have all expected ORM relationships wired."""
    from db import Deal

    rel_names = {r.key for r in Deal.__mapper__.relationships}
    assert {
        "property",
        "agent",
        "assignee",
        "investor",
        "underwriting",
        "attachments",
        "comments",
        "funding_requests",
        "activities",
        "offer_documents",
    } <= rel_names


def test_deal_children_cascade_delete():
    """Deleting a deal removes its attachments, comments and history."""
    from db import Deal

    rels = {r.key: r for r in Deal.__mapper__.relationships}
    for key in ("attachments", "comments", "activities"):
        assert "delete-orphan" in rels[key].cascade


def test_one_property_and_one_underwriting_per_deal():
    from db import Deal, UnderwritingRecord

    assert Deal.__table__.c.property_id.unique
    assert Deal.__table__.c.deal_number.unique
    assert UnderwritingRecord.__table__.c.deal_id.unique


def test_one_funding_request_per_investor_per_deal():
    from db import InvestorFunding

    names = {c.name for c in InvestorFunding.__table__.constraints}
    assert "uq_investor_funding_deal_investor" in names


def test_audit_log_has_hash_chain_column():
    from db import AuditLog

    assert "prev_hash" in AuditLog.__table__.c


def test_all_tables_registered():
    from db import Base

    assert {
        "profiles",
        "properties",
        "deals",
        "underwriting_records",
        "attachments",
        "deal_comments",
        "notifications",
        "audit_logs",
        "investor_funding",
        "deal_activities",
        "offer_documents",
        "user_formula_settings",
        "demo_data_manifest",
    } <= set(Base.metadata.tables)
