"""Schemas for the caller identity and the /api/user response."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class UserInfo(BaseModel):
    """Caller identity supplied by the front proxy (Azure Easy Auth) or local config."""

    user_id: str = Field(..., description="User client ID (Azure Entra ID)")
    user_name: str = Field(..., description="User display name")
    first_name: Optional[str] = Field(None, description="User's first name")
    principal_name: Optional[str] = Field(None, description="User principal name (email)")
    is_authenticated: bool = Field(..., description="Whether the caller identity was established")
    mode: Literal["local", "easyauth"] = Field(
        ...,
        description="How the caller was identified: the configured local test identity or Easy Auth proxy headers",
    )


class UserProfile(UserInfo):
    """The caller plus the generation context configured for them."""

    tool_servers: list[str] = Field(
        default_factory=list,
        description="Display names of the tool servers attached to this caller's generations by default",
    )
