"""Model registry with centralized, typed model definitions.

This module provides:
- ModelDefinition: Immutable model configuration dataclass
- ResolvedModelConfig: Model configuration with the provider key attached
- ModelRegistry: Holds the provider key and resolves model configurations
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from dotenv import load_dotenv

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..infrastructure.keyvault import AKV

load_dotenv()

ANTHROPIC_SECRET_NAME = "ANTHROPIC-API-KEY"


# --- Model Definition ---
@dataclass(frozen=True)
class ModelDefinition:
    """Immutable model configuration."""

    name: str
    display_name: str
    model_id: str
    max_tokens: int
    supports_web_search: bool = True


# --- Available Models ---
CLAUDE_SONNET_4 = ModelDefinition(
    name="claude-sonnet-4",
    display_name="Claude Sonnet 4",
    model_id="claude-sonnet-4-20250514",
    max_tokens=8000,
)

CLAUDE_OPUS_4 = ModelDefinition(
    name="claude-opus-4",
    display_name="Claude Opus 4",
    model_id="claude-opus-4-20250514",
    max_tokens=8000,
)

CLAUDE_HAIKU_35 = ModelDefinition(
    name="claude-3-5-haiku",
    display_name="Claude 3.5 Haiku",
    model_id="claude-3-5-haiku-20241022",
    max_tokens=8000,
)

AVAILABLE_MODELS: list[ModelDefinition] = [CLAUDE_SONNET_4, CLAUDE_OPUS_4, CLAUDE_HAIKU_35]

DEFAULT_MODEL = CLAUDE_SONNET_4.name


# --- Resolved Config (with credentials) ---
@dataclass(frozen=True)
class ResolvedModelConfig:
    """Resolved model configuration with API credentials."""

    model_id: str
    max_tokens: int
    api_key: str
    supports_web_search: bool


# --- Model Registry ---
class ModelRegistry:
    """Registry that holds the provider key and resolves model configurations.

    Initialize once in app lifespan and store in app.state.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        akv: Optional["AKV"] = None,
        default_model: str = DEFAULT_MODEL,
        max_tokens: Optional[int] = None,
    ):
        """Initialize registry and resolve the provider key.

        Args:
            api_key: Anthropic API key from settings
            akv: Key Vault client with pre-loaded secrets, used when api_key is empty
            default_model: Registry name used when a request names no model
            max_tokens: Optional cap applied to every model

        Raises:
            ConfigurationError: If no API key is available or default_model is unknown
        """
        if not api_key and akv is not None:
            api_key = akv.get_secret(ANTHROPIC_SECRET_NAME)
        if not api_key:
            raise ConfigurationError(
                "Anthropic API key not configured. Set ANTHROPIC_API_KEY or KEY_VAULT_NAME."
            )
        self._api_key = api_key
        self._models = {m.name: m for m in AVAILABLE_MODELS}
        if default_model not in self._models:
            raise ConfigurationError(f"Unknown default model: {default_model}")
        self._default_model = default_model
        self._max_tokens = max_tokens

    @property
    def default_model(self) -> str:
        return self._default_model

    def has(self, model_name: str) -> bool:
        return model_name in self._models

    def get(self, model_name: Optional[str] = None) -> ResolvedModelConfig:
        """Get resolved model config by name.

        Args:
            model_name: Registry name; None resolves the default model

        Returns:
            ResolvedModelConfig with model_id, max_tokens, api_key

        Raises:
            KeyError: If model_name is not in the registry
        """
        model = self._models[model_name or self._default_model]
        max_tokens = model.max_tokens
        if self._max_tokens:
            max_tokens = min(max_tokens, self._max_tokens)
        return ResolvedModelConfig(
            model_id=model.model_id,
            max_tokens=max_tokens,
            api_key=self._api_key,
            supports_web_search=model.supports_web_search,
        )

    def list_models(self) -> list[ModelDefinition]:
        """List all available models.

        Returns:
            List of ModelDefinition objects
        """
        return AVAILABLE_MODELS
