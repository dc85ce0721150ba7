"""User API routes."""

from fastapi import APIRouter

from ..dependencies import CurrentUserDep, ToolServerProviderDep
from ..schemas import UserProfile

router = APIRouter()


@router.get("/user", response_model=UserProfile)
async def get_user(current_user: CurrentUserDep, tool_server_provider: ToolServerProviderDep) -> UserProfile:
    """Get the caller identity and the tool servers their generations use.

    Only server display names are returned; endpoints and tokens stay server-side.
    """
    servers = tool_server_provider.for_user(current_user.user_id)
    return UserProfile(**current_user.model_dump(), tool_servers=[s.display_name for s in servers])
