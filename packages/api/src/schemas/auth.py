# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field


class DataScope(BaseModel):
    """Which deals a caller may read, and whether seller contact is masked.

    Agents: ``own_deals_only``. Investors: ``investor_view`` plus
    ``pii_mask``. Underwriters and admins: ``full_pipeline``.
    """

    own_deals_only: bool = False
    investor_view: bool = False
    pii_mask: bool = False
    user_id: str | None = None
    full_pipeline: bool = False


class UserContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str
    data_scope: DataScope = Field(default_factory=DataScope)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.user_id


class TokenPayload(BaseModel):
    """Decoded JWT claims.

    Roles may arrive as Keycloak realm roles or as ``app_metadata.role``
    from a hosted auth provider; both are honoured.
    """

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    realm_access: dict = Field(default_factory=dict)
    app_metadata: dict = Field(default_factory=dict)

    def claimed_roles(self) -> set[str]:
        claimed = set(self.realm_access.get("roles", []))
        app_role = self.app_metadata.get("role")
        if app_role:
            claimed.add(app_role)
        return claimed
