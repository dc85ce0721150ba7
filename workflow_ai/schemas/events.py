"""Pydantic schemas for the client-facing relay events.

Each event serializes (by alias) to the JSON carried in one SSE ``data:``
frame. ``Done`` has no JSON body; the transport writes the literal terminal
marker instead.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, Field


class TextDelta(BaseModel):
    """A fragment of assistant text, emitted exactly once and in order."""

    type: Literal["text"] = Field(default="text")
    text: str = Field(..., serialization_alias="content")


class ToolCallStarted(BaseModel):
    """Emitted when the model begins a tool call."""

    type: Literal["tool_call_start"] = Field(default="tool_call_start")
    id: str = Field(..., serialization_alias="toolCallId")
    tool_name: str = Field(..., serialization_alias="toolName")
    initial_input: Any = Field(default_factory=dict, serialization_alias="input")


class ToolCallInputChunk(BaseModel):
    """A raw fragment of a tool call's JSON input."""

    type: Literal["tool_call_input"] = Field(default="tool_call_input")
    id: str = Field(..., serialization_alias="toolCallId")
    partial_json_fragment: str = Field(..., serialization_alias="partialJson")


class ToolCallResult(BaseModel):
    """The outcome of a provider or local tool call."""

    type: Literal["tool_call_result"] = Field(default="tool_call_result")
    id: str = Field(..., serialization_alias="toolCallId")
    tool_name: str = Field(..., serialization_alias="toolName")
    result: Any = Field(...)


class StructuredDocument(BaseModel):
    """The workflow document extracted once generation finished."""

    type: Literal["workflow"] = Field(default="workflow")
    document: dict[str, Any] = Field(..., serialization_alias="content")


class Error(BaseModel):
    """A fatal error; always followed by Done."""

    type: Literal["error"] = Field(default="error")
    message: str = Field(..., serialization_alias="content")


class Done(BaseModel):
    """End of the event sequence."""

    type: Literal["done"] = Field(default="done")


RelayEvent = Union[
    TextDelta,
    ToolCallStarted,
    ToolCallInputChunk,
    ToolCallResult,
    StructuredDocument,
    Error,
    Done,
]
