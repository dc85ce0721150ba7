"""FastAPI application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .generator.model_registry import DEFAULT_MODEL
from .generator.tool_router import DEFAULT_WEB_SEARCH_USES, TOOL_SERVER_WEB_SEARCH_USES
from .schemas.generation import ToolServerDescriptor


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Anthropic provider. The key may instead come from Key Vault.
    anthropic_api_key: Optional[str] = None
    anthropic_base_url: Optional[str] = None

    # Azure Key Vault holding ANTHROPIC-API-KEY (optional)
    key_vault_name: Optional[str] = None

    # Default model (from registry, can be overridden via env)
    default_model: str = DEFAULT_MODEL
    max_tokens: int = 8000
    temperature: float = 0.3

    # Tool routing
    web_search_default_uses: int = DEFAULT_WEB_SEARCH_USES
    web_search_tool_server_uses: int = TOOL_SERVER_WEB_SEARCH_USES
    # Declare the local workflow tools to the model
    custom_tools_enabled: bool = False

    # External tool servers. JSON list in env, e.g.
    # TOOL_SERVERS='[{"endpointUrl": "https://...", "displayName": "github"}]'
    tool_servers: list[ToolServerDescriptor] = []
    # Per-user overrides keyed by user id
    user_tool_servers: dict[str, list[ToolServerDescriptor]] = {}

    # Auth mode: "local" uses the test identity, "easyauth" reads Azure Easy Auth headers
    auth_mode: str = "local"
    local_test_client_id: str = "00000000-0000-0000-0000-000000000001"
    local_test_username: str = "local_user"

    # CORS
    cors_allow_origins: list[str] = ["*"]

    # Observability settings
    tracing_backend: str = "disabled"  # "disabled", "local", "appinsights"
    local_otlp_endpoint: str = "http://localhost:4317"
    appinsights_connection_string: Optional[str] = None
    service_name: str = "workflow-ai"

    @property
    def uses_easyauth(self) -> bool:
        return self.auth_mode == "easyauth"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
