# This project was developed with assistance from AI tools.
"""Persona factories for functional tests.

Each function returns a UserContext matching the DataScope built by
``core/auth.py:build_data_scope()`` for that role. Fixed user IDs
ensure cross-test consistency.
"""

from db.enums import UserRole

from src.schemas.auth import DataScope, UserContext

# Fixed IDs for cross-test referencing
AGENT_USER_ID = "maria-lopez-agent"
AGENT_BOB_USER_ID = "bob-nguyen-agent"
UW_USER_ID = "dana-reyes-uw"
ADMIN_USER_ID = "admin-user"
INVESTOR_USER_ID = "ira-capital-investor"
INVESTOR_OTHER_USER_ID = "lena-fund-investor"


def agent() -> UserContext:
    return UserContext(
        user_id=AGENT_USER_ID,
        role=UserRole.AGENT,
        email="maria@dealflow.example",
        name="Maria Lopez",
        data_scope=DataScope(own_deals_only=True, user_id=AGENT_USER_ID),
    )


def agent_bob() -> UserContext:
    return UserContext(
        user_id=AGENT_BOB_USER_ID,
        role=UserRole.AGENT,
        email="bob@dealflow.example",
        name="Bob Nguyen",
        data_scope=DataScope(own_deals_only=True, user_id=AGENT_BOB_USER_ID),
    )


def underwriter() -> UserContext:
    return UserContext(
        user_id=UW_USER_ID,
        role=UserRole.UNDERWRITER,
        email="dana@dealflow.example",
        name="Dana Reyes",
        data_scope=DataScope(full_pipeline=True, user_id=UW_USER_ID),
    )


def admin() -> UserContext:
    return UserContext(
        user_id=ADMIN_USER_ID,
        role=UserRole.ADMIN,
        email="admin@dealflow.example",
        name="Admin User",
        data_scope=DataScope(full_pipeline=True, user_id=ADMIN_USER_ID),
    )


def investor() -> UserContext:
    return UserContext(
        user_id=INVESTOR_USER_ID,
        role=UserRole.INVESTOR,
        email="ira@capital.example",
        name="Ira Capital",
        data_scope=DataScope(investor_view=True, pii_mask=True, user_id=INVESTOR_USER_ID),
    )


def investor_other() -> UserContext:
    return UserContext(
        user_id=INVESTOR_OTHER_USER_ID,
        role=UserRole.INVESTOR,
        email="lena@fund.example",
        name="Lena Fund",
        data_scope=DataScope(investor_view=True, pii_mask=True, user_id=INVESTOR_OTHER_USER_ID),
    )
