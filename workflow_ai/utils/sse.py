"""Server-sent event framing for relay events."""

import json

from ..schemas.events import Done, RelayEvent

DONE_FRAME = "data: [DONE]\n\n"

# Headers for SSE responses that must not be buffered by proxies
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_event(data: dict) -> str:
    """Format data as an SSE data frame.

    Args:
        data: Dictionary to JSON serialize as event data

    Returns:
        Formatted SSE frame string
    """
    return f"data: {json.dumps(data)}\n\n"


def encode_event(event: RelayEvent) -> str:
    """Encode one relay event as its wire frame. Done becomes the [DONE] marker."""
    if isinstance(event, Done):
        return DONE_FRAME
    return format_sse_event(event.model_dump(by_alias=True, mode="json"))
