"""FastAPI application for the WorkFlow AI generation API.

This module provides the main FastAPI application with:
- Lifespan management for secrets, the model registry and tracing
- CORS middleware
- Route registration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .generator import ModelGateway, ModelRegistry
from .generator.model_registry import ANTHROPIC_SECRET_NAME
from .infrastructure import AKV, ToolServerProvider, configure_tracing
from .routes import generate, models, user

APPINSIGHTS_SECRET_NAME = "APPLICATIONINSIGHTS-CONNECTION-STRING"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build process-wide, read-only state once at startup.

    Fails fast with ConfigurationError when no Anthropic API key can be
    resolved from settings or Key Vault.
    """
    app_settings = get_settings()
    logger.info(f"Starting application with auth mode: {app_settings.auth_mode}")

    akv = None
    appinsights_connection_string = app_settings.appinsights_connection_string
    if app_settings.key_vault_name:
        # Pre-load every secret still missing from settings
        required_secrets = []
        if not app_settings.anthropic_api_key:
            required_secrets.append(ANTHROPIC_SECRET_NAME)
        if app_settings.tracing_backend == "appinsights" and not appinsights_connection_string:
            required_secrets.append(APPINSIGHTS_SECRET_NAME)
        akv = AKV(vault_name=app_settings.key_vault_name)
        akv.load_secrets(required_secrets)
        if APPINSIGHTS_SECRET_NAME in required_secrets:
            appinsights_connection_string = akv.get_secret(APPINSIGHTS_SECRET_NAME)
    app.state.keyvault = akv

    configure_tracing(
        backend=app_settings.tracing_backend,
        appinsights_connection_string=appinsights_connection_string,
        otlp_endpoint=app_settings.local_otlp_endpoint,
        service_name=app_settings.service_name,
    )

    registry = ModelRegistry(
        api_key=app_settings.anthropic_api_key,
        akv=akv,
        default_model=app_settings.default_model,
        max_tokens=app_settings.max_tokens,
    )
    app.state.model_registry = registry
    app.state.gateway = ModelGateway(
        registry,
        base_url=app_settings.anthropic_base_url,
        temperature=app_settings.temperature,
        custom_tools_enabled=app_settings.custom_tools_enabled,
    )
    app.state.tool_servers = ToolServerProvider(
        defaults=app_settings.tool_servers,
        per_user=app_settings.user_tool_servers,
    )
    logger.info(f"Model registry ready, default model: {registry.default_model}")

    yield

    logger.info("Shutting down application")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="WorkFlow AI API",
        description="Streams n8n workflow generation from Anthropic models over SSE",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(user.router, prefix="/api", tags=["user"])
    app.include_router(models.router, prefix="/api", tags=["models"])
    app.include_router(generate.router, prefix="/api", tags=["workflows"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Create the app instance
app = create_app()
