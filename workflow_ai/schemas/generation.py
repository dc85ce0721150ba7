"""Pydantic schemas for the workflow generation endpoint."""

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

Action = Literal["generate", "analyze", "edit", "chat"]

ACTIONS: tuple[str, ...] = ("generate", "analyze", "edit", "chat")


class ChatTurn(BaseModel):
    """A single prior turn of the conversation, owned by the caller."""

    role: Literal["user", "assistant"] = Field(..., description="Speaker of the turn")
    content: str = Field(..., description="Turn text")

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: Any) -> str:
        """Anything that is not the user is treated as the assistant."""
        return "user" if v == "user" else "assistant"


class ToolServerDescriptor(BaseModel):
    """An external tool server the model may call during generation."""

    endpoint_url: str = Field(
        ...,
        validation_alias=AliasChoices("endpointUrl", "endpoint_url", "url"),
        serialization_alias="endpointUrl",
        description="Server URL",
    )
    display_name: str = Field(
        ...,
        validation_alias=AliasChoices("displayName", "display_name", "name"),
        serialization_alias="displayName",
        description="Name shown to the model",
    )
    auth_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("authToken", "auth_token", "authorization_token"),
        serialization_alias="authToken",
        description="Bearer token forwarded to the server",
    )
    enabled_tools: Optional[list[str]] = Field(
        None,
        validation_alias=AliasChoices("enabledTools", "enabled_tools", "allowed_tools"),
        serialization_alias="enabledTools",
        description="Tool allow-list; None exposes every tool",
    )
    tools_enabled: bool = Field(
        True,
        validation_alias=AliasChoices("toolsEnabled", "tools_enabled", "enabled"),
        serialization_alias="toolsEnabled",
        description="Whether the server is attached at all",
    )


class GenerationRequest(BaseModel):
    """Schema for a workflow generation request."""

    message: str = Field(..., min_length=1, description="User message content")
    history: list[ChatTurn] = Field(
        default_factory=list,
        validation_alias=AliasChoices("history", "chatHistory", "chat_history"),
        description="Prior conversation turns, oldest first",
    )
    action: Action = Field("chat", description="Task the model should perform")
    existing_document: Optional[dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("existingDocument", "existing_document", "selectedWorkflow"),
        description="Workflow to analyze or edit",
    )
    credential_hints: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("credentialHints", "credential_hints", "credentials"),
        description="Names of credentials available to the workflow",
    )
    tool_servers: Optional[list[ToolServerDescriptor]] = Field(
        None,
        validation_alias=AliasChoices("toolServers", "tool_servers"),
        description="External tool servers; None uses the caller's configured servers",
    )
    model: Optional[str] = Field(None, description="Model override from the registry")

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace before validation."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("action", mode="before")
    @classmethod
    def coerce_action(cls, v: Any) -> str:
        """Unknown or missing actions fall back to plain chat."""
        return v if v in ACTIONS else "chat"

    @field_validator("credential_hints", mode="before")
    @classmethod
    def credential_names(cls, v: Any) -> list[str]:
        """Keep only credential names; mapping values are dropped."""
        if v is None:
            return []
        if isinstance(v, dict):
            v = list(v.keys())
        names: list[str] = []
        for name in v:
            name = str(name)
            if name and name not in names:
                names.append(name)
        return names
