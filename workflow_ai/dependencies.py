"""FastAPI dependency injection functions."""

import base64
import json
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from .config import Settings, get_settings
from .generator.gateway import ModelGateway
from .generator.model_registry import ModelRegistry
from .infrastructure import ToolServerProvider
from .schemas import UserInfo

logger = logging.getLogger(__name__)


async def get_model_registry(request: Request) -> ModelRegistry:
    """Get the ModelRegistry built at startup from app state."""
    return request.app.state.model_registry


async def get_gateway(request: Request) -> ModelGateway:
    """Get the shared ModelGateway from app state."""
    return request.app.state.gateway


async def get_tool_server_provider(request: Request) -> ToolServerProvider:
    """Get the ToolServerProvider from app state."""
    return request.app.state.tool_servers


def _display_name_from_principal(encoded: str) -> str | None:
    """Read the 'name' claim from the base64 x-ms-client-principal header."""
    try:
        principal = json.loads(base64.b64decode(encoded).decode("utf-8"))
    except ValueError as e:
        logger.warning(f"Unreadable client principal header: {e}")
        return None
    for claim in principal.get("claims", []) if isinstance(principal, dict) else []:
        if isinstance(claim, dict) and claim.get("typ") == "name":
            return claim.get("val")
    return None


async def get_current_user(
    settings: Annotated[Settings, Depends(get_settings)],
    x_ms_client_principal_id: Annotated[str | None, Header()] = None,
    x_ms_client_principal_name: Annotated[str | None, Header()] = None,
    x_ms_client_principal: Annotated[str | None, Header()] = None,
) -> UserInfo:
    """Resolve the caller identity supplied by the front proxy.

    In "local" auth mode the configured test identity is returned. In
    "easyauth" mode the Azure Easy Auth headers are trusted as already
    verified; a request without them is rejected.

    Args:
        settings: Application settings
        x_ms_client_principal_id: Azure AD client principal ID header
        x_ms_client_principal_name: Azure AD client principal name header
        x_ms_client_principal: Base64-encoded client principal JSON header

    Returns:
        UserInfo with user details

    Raises:
        HTTPException: 401 in easyauth mode when the principal headers are missing
    """
    if not settings.uses_easyauth:
        return UserInfo(
            user_id=settings.local_test_client_id,
            user_name=settings.local_test_username,
            first_name=settings.local_test_username.split()[0] if settings.local_test_username else "User",
            principal_name=None,
            is_authenticated=True,
            mode="local",
        )

    if not x_ms_client_principal_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    display_name = None
    if x_ms_client_principal:
        display_name = _display_name_from_principal(x_ms_client_principal)
    display_name = display_name or x_ms_client_principal_name or "Unknown user"

    return UserInfo(
        user_id=x_ms_client_principal_id,
        user_name=display_name,
        first_name=display_name.split()[0] if display_name.strip() else "there",
        principal_name=x_ms_client_principal_name,
        is_authenticated=True,
        mode="easyauth",
    )


# Type aliases for dependency injection
CurrentUserDep = Annotated[UserInfo, Depends(get_current_user)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
ModelRegistryDep = Annotated[ModelRegistry, Depends(get_model_registry)]
GatewayDep = Annotated[ModelGateway, Depends(get_gateway)]
ToolServerProviderDep = Annotated[ToolServerProvider, Depends(get_tool_server_provider)]
