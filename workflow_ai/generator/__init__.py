"""Generation pipeline: prompt building, tool routing, provider streaming and extraction."""

from .extractor import dangling_connections, extract, normalize_workflow
from .gateway import ModelGateway, StreamHandle, build_messages
from .model_registry import AVAILABLE_MODELS, DEFAULT_MODEL, ModelDefinition, ModelRegistry
from .prompt_builder import PromptPair, build
from .relay import RelayPhase, StreamRelay
from .tool_router import ToolPlan, decide

__all__ = [
    # Prompt Builder
    "PromptPair",
    "build",
    # Tool Router
    "ToolPlan",
    "decide",
    # Model Gateway
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "ModelDefinition",
    "ModelGateway",
    "ModelRegistry",
    "StreamHandle",
    "build_messages",
    # Stream Relay
    "RelayPhase",
    "StreamRelay",
    # Workflow Extractor
    "dangling_connections",
    "extract",
    "normalize_workflow",
]
