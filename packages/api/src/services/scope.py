# This project was developed with assistance from AI tools.
"""Shared data scope filtering for deal queries.

Centralizes the DataScope -> SQL WHERE logic so that every service that
reads deals, or rows hanging off a deal, applies the same visibility rules.
"""

from db import Deal, InvestorFunding
from db.enums import DealStatus
from sqlalchemy import and_, false, or_

from ..schemas.auth import DataScope


def deal_visibility(scope: DataScope):
    """WHERE clause selecting the deals this scope may see, or None for all."""
    if scope.full_pipeline:
        return None
    if scope.own_deals_only and scope.user_id:
        return or_(Deal.agent_id == scope.user_id, Deal.assigned_to == scope.user_id)
    if scope.investor_view and scope.user_id:
        return or_(
            and_(
                Deal.status.in_([s.value for s in DealStatus.fundable_statuses()]),
                Deal.investor_id.is_(None),
            ),
            Deal.investor_id == scope.user_id,
            Deal.funding_requests.any(InvestorFunding.investor_id == scope.user_id),
        )
    return false()


def apply_data_scope(stmt, scope: DataScope, *, join_to_deal=None):
    """Apply data scope filtering to a select.

    Args:
        stmt: A SQLAlchemy select statement.
        scope: The caller's DataScope.
        join_to_deal: ORM relationship to join through to reach Deal
            (e.g. ``DealComment.deal``). ``None`` when selecting Deal.
    """
    clause = deal_visibility(scope)
    if clause is None:
        return stmt
    if join_to_deal is not None:
        stmt = stmt.join(join_to_deal)
    return stmt.where(clause)
