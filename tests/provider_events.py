"""Recorded Anthropic stream shapes and a fake stream handle for relay tests."""

import asyncio
import json
from typing import Any, Optional

from workflow_ai.errors import StreamReadError


class FakeStreamHandle:
    """Replays recorded provider events and records how it was closed."""

    def __init__(self, events: list[dict[str, Any]], fail_after: Optional[int] = None):
        self.events = events
        self.fail_after = fail_after
        self.close_calls = 0
        self.read = 0

    async def __aiter__(self):
        for index, event in enumerate(self.events):
            if self.fail_after is not None and index >= self.fail_after:
                raise StreamReadError("connection reset by peer")
            self.read += 1
            yield event
        if self.fail_after is not None and self.fail_after >= len(self.events):
            raise StreamReadError("connection reset by peer")

    async def aclose(self) -> None:
        self.close_calls += 1

    @property
    def closed(self) -> bool:
        return self.close_calls > 0


class StallingStreamHandle(FakeStreamHandle):
    """Replays its events, then blocks on the next read until cancelled."""

    async def __aiter__(self):
        for event in self.events:
            self.read += 1
            yield event
        await asyncio.Event().wait()


# --- Provider event factories (Anthropic streaming shapes) ---

def message_start(model: str = "claude-sonnet-4-20250514") -> dict[str, Any]:
    return {"type": "message_start", "message": {"id": "msg_1", "model": model, "content": []}}


def text_start(index: int = 0, text: str = "") -> dict[str, Any]:
    return {"type": "content_block_start", "index": index, "content_block": {"type": "text", "text": text}}


def text_delta(text: str, index: int = 0) -> dict[str, Any]:
    return {"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text}}


def tool_use_start(
    call_id: str, name: str, index: int = 1, block_type: str = "tool_use", tool_input: Any = None
) -> dict[str, Any]:
    return {
        "type": "content_block_start",
        "index": index,
        "content_block": {"type": block_type, "id": call_id, "name": name, "input": tool_input or {}},
    }


def input_json(fragment: str, index: int = 1) -> dict[str, Any]:
    return {"type": "content_block_delta", "index": index, "delta": {"type": "input_json_delta", "partial_json": fragment}}


def block_stop(index: int = 0) -> dict[str, Any]:
    return {"type": "content_block_stop", "index": index}


def web_search_result(call_id: str, results: Any, index: int = 2) -> dict[str, Any]:
    return {
        "type": "content_block_start",
        "index": index,
        "content_block": {"type": "web_search_tool_result", "tool_use_id": call_id, "content": results},
    }


def message_stop() -> dict[str, Any]:
    return {"type": "message_stop"}


def error_event(message: str = "Overloaded") -> dict[str, Any]:
    return {"type": "error", "error": {"type": "overloaded_error", "message": message}}


def text_stream(*chunks: str) -> list[dict[str, Any]]:
    """A complete single-text-block message."""
    return [
        message_start(),
        text_start(),
        *[text_delta(chunk) for chunk in chunks],
        block_stop(),
        {"type": "message_delta", "delta": {"stop_reason": "end_turn"}},
        message_stop(),
    ]


def fenced(document: dict[str, Any]) -> str:
    return f"```json\n{json.dumps(document, indent=2)}\n```"


SHEETS_TO_SLACK = {
    "name": "Google Sheets to Slack Hourly Sync",
    "nodes": [
        {
            "id": "node-1",
            "name": "Every Hour",
            "type": "n8n-nodes-base.scheduleTrigger",
            "parameters": {"rule": {"interval": [{"field": "hours"}]}},
        },
        {
            "id": "node-2",
            "name": "Read Sheet",
            "type": "n8n-nodes-base.googleSheets",
            "parameters": {"operation": "read"},
        },
        {
            "id": "node-3",
            "name": "Post to Slack",
            "type": "n8n-nodes-base.slack",
            "parameters": {"channel": "#updates"},
            "credentials": {"slackApi": {"name": "Slack account"}},
        },
    ],
    "connections": {
        "Every Hour": {"main": [[{"node": "Read Sheet", "type": "main", "index": 0}]]},
        "Read Sheet": {"main": [[{"node": "Post to Slack", "type": "main", "index": 0}]]},
    },
}


