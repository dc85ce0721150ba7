"""Pydantic schemas for API requests, responses and relay events."""

from .events import (
    Done,
    Error,
    RelayEvent,
    StructuredDocument,
    TextDelta,
    ToolCallInputChunk,
    ToolCallResult,
    ToolCallStarted,
)
from .generation import ACTIONS, Action, ChatTurn, GenerationRequest, ToolServerDescriptor
from .models import ModelInfo, ModelsResponse
from .user import UserInfo, UserProfile
from .workflow import NodeSpec, WorkflowDocument

__all__ = [
    # Request schemas
    "ACTIONS",
    "Action",
    "ChatTurn",
    "GenerationRequest",
    "ToolServerDescriptor",
    # Relay events
    "RelayEvent",
    "TextDelta",
    "ToolCallStarted",
    "ToolCallInputChunk",
    "ToolCallResult",
    "StructuredDocument",
    "Error",
    "Done",
    # Workflow document
    "NodeSpec",
    "WorkflowDocument",
    # Other API schemas
    "ModelInfo",
    "ModelsResponse",
    "UserInfo",
    "UserProfile",
]
