"""Utility modules for the FastAPI application."""

from .sse import DONE_FRAME, SSE_HEADERS, encode_event, format_sse_event

__all__ = [
    "DONE_FRAME",
    "SSE_HEADERS",
    "encode_event",
    "format_sse_event",
]
