# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer and by the seed CLI, which builds a
UserContext outside the request lifecycle.
"""

from db.enums import UserRole

from ..schemas.auth import DataScope, UserContext


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.AGENT:
        return DataScope(own_deals_only=True, user_id=user_id)
    if role == UserRole.INVESTOR:
        return DataScope(investor_view=True, pii_mask=True, user_id=user_id)
    if role in (UserRole.UNDERWRITER, UserRole.ADMIN):
        return DataScope(full_pipeline=True, user_id=user_id)
    return DataScope()


def system_user(user_id: str = "system") -> UserContext:
    """Admin-equivalent context for CLI jobs."""
    return UserContext(
        user_id=user_id,
        role=UserRole.ADMIN,
        email="system@dealflow.local",
        name="System",
        data_scope=build_data_scope(UserRole.ADMIN, user_id),
    )
