"""Model catalogue API routes."""

from fastapi import APIRouter

from ..dependencies import ModelRegistryDep
from ..schemas import ModelInfo, ModelsResponse

router = APIRouter()


@router.get("/models", response_model=ModelsResponse)
async def get_models(registry: ModelRegistryDep) -> ModelsResponse:
    """List models a generation request may name.

    Returns:
        ModelsResponse with the registry models and the default
    """
    return ModelsResponse(
        models=[ModelInfo(name=m.name, display_name=m.display_name) for m in registry.list_models()],
        default=registry.default_model,
    )
