"""Stream relay: translates Anthropic stream events into client relay events.

The relay is an explicit state machine::

    STREAMING --message_stop--> FINALIZING --> TERMINATED
    STREAMING --error / read failure / truncation--> TERMINATED

While STREAMING, each provider event is dispatched through a translation
table keyed by event type and yields zero or more relay events. FINALIZING
runs workflow extraction once over the accumulated text. Nothing is emitted
after TERMINATED, and no workflow is emitted after an error.

One relay instance serves exactly one request.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Callable, Optional
from urllib.parse import urlparse

from ..errors import StreamReadError
from ..schemas.events import (
    Done,
    Error,
    RelayEvent,
    StructuredDocument,
    TextDelta,
    ToolCallInputChunk,
    ToolCallResult,
    ToolCallStarted,
)
from ..schemas.workflow import WorkflowDocument
from .extractor import extract
from .gateway import ProviderStream
from .tools import execute_tool

logger = logging.getLogger(__name__)

# Content block types that open a tool call
LOCAL_TOOL_BLOCK = "tool_use"
TOOL_CALL_BLOCKS = (LOCAL_TOOL_BLOCK, "server_tool_use", "mcp_tool_use")

MAX_SEARCH_RESULTS = 10


class RelayPhase(str, Enum):
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    TERMINATED = "terminated"


@dataclass
class ToolCallState:
    """A tool call the model has started in this message."""

    name: str
    block_type: str
    initial_input: Any = field(default_factory=dict)
    accumulated_input_json: str = ""
    complete: bool = False


@dataclass
class RelayState:
    """Mutable per-request state, owned by a single relay."""

    accumulated_text: str = ""
    in_flight_tool_calls: dict[str, ToolCallState] = field(default_factory=dict)
    block_calls: dict[int, str] = field(default_factory=dict)
    terminated: bool = False


def normalize_search_results(content: Any) -> list[dict[str, str]]:
    """Reduce provider web search output to title/url/snippet/domain records.

    Anything unparseable (including provider search errors) gives an empty list.
    """
    if not isinstance(content, list):
        return []

    results = []
    for item in content:
        if not isinstance(item, dict) or item.get("type", "web_search_result") != "web_search_result":
            continue
        url = item.get("url") or ""
        try:
            domain = urlparse(url).hostname or ""
        except ValueError:
            domain = ""
        results.append({
            "title": item.get("title") or "Untitled",
            "url": url,
            "snippet": item.get("snippet") or item.get("description") or "",
            "domain": domain,
        })
        if len(results) >= MAX_SEARCH_RESULTS:
            break
    return results


def _tool_result_text(content: Any) -> list[str]:
    if isinstance(content, str):
        return [content]
    if not isinstance(content, list):
        return []
    return [block["text"] for block in content if isinstance(block, dict) and isinstance(block.get("text"), str)]


class StreamRelay:
    """Relays one provider stream as a sequence of RelayEvents."""

    def __init__(
        self,
        extractor: Callable[[str], Optional[WorkflowDocument]] = extract,
        tool_executor: Callable[[str, Any], dict[str, Any]] = execute_tool,
    ):
        self.state = RelayState()
        self.phase = RelayPhase.STREAMING
        self._extract = extractor
        self._execute_tool = tool_executor
        self._translations: dict[str, Callable[[dict[str, Any]], list[RelayEvent]]] = {
            "content_block_start": self._on_block_start,
            "content_block_delta": self._on_block_delta,
            "content_block_stop": self._on_block_stop,
            "web_search_tool_result": self._on_web_search_result,
            "message_start": self._on_message_start,
            "message_delta": self._on_message_delta,
            "message_stop": self._on_message_stop,
            "error": self._on_error,
        }

    # =========================================================================
    # State transitions
    # =========================================================================

    def translate(self, event: dict[str, Any]) -> list[RelayEvent]:
        """Translate one provider event. Returns [] once terminated."""
        if self.phase is not RelayPhase.STREAMING:
            return []
        handler = self._translations.get(event.get("type", ""))
        if handler is None:
            return []
        return handler(event)

    def finalize(self) -> list[RelayEvent]:
        """End of message: extract at most one workflow, then terminate."""
        if self.phase is not RelayPhase.STREAMING:
            return []
        self.phase = RelayPhase.FINALIZING
        logger.info(f"Provider stream finished, content length: {len(self.state.accumulated_text)}")

        events: list[RelayEvent] = []
        document = self._extract(self.state.accumulated_text)
        if document is not None:
            events.append(StructuredDocument(document=document.to_dict()))
        return events + self._terminate()

    def fail(self, message: str) -> list[RelayEvent]:
        """Fatal error: report it and terminate without extraction."""
        if self.phase is RelayPhase.TERMINATED:
            return []
        logger.error(f"Relay failed: {message}")
        return [Error(message=message), *self._terminate()]

    def _terminate(self) -> list[RelayEvent]:
        self.phase = RelayPhase.TERMINATED
        self.state.terminated = True
        return [Done()]

    # =========================================================================
    # Translation table
    # =========================================================================

    def _on_message_start(self, event: dict[str, Any]) -> list[RelayEvent]:
        message = event.get("message") or {}
        logger.debug(f"Message started: model={message.get('model')}")
        return []

    def _on_message_delta(self, event: dict[str, Any]) -> list[RelayEvent]:
        stop_reason = (event.get("delta") or {}).get("stop_reason")
        if stop_reason:
            logger.info(f"Stop reason: {stop_reason}")
        return []

    def _on_message_stop(self, event: dict[str, Any]) -> list[RelayEvent]:
        return self.finalize()

    def _on_error(self, event: dict[str, Any]) -> list[RelayEvent]:
        error = event.get("error") or {}
        return self.fail(f"Provider error: {error.get('message') or 'Unknown error'}")

    def _on_block_start(self, event: dict[str, Any]) -> list[RelayEvent]:
        block = event.get("content_block") or {}
        block_type = block.get("type")

        if block_type == "text":
            return self._append_text(block.get("text") or "")

        if block_type in TOOL_CALL_BLOCKS:
            call_id = block.get("id")
            name = block.get("name")
            if not call_id or not name:
                logger.warning(f"Ignoring {block_type} block without id or name")
                return []
            initial_input = block.get("input") or {}
            self.state.in_flight_tool_calls[call_id] = ToolCallState(
                name=name, block_type=block_type, initial_input=initial_input
            )
            index = event.get("index")
            if isinstance(index, int):
                self.state.block_calls[index] = call_id
            logger.info(f"Tool use started: {name} ({call_id})")
            return [ToolCallStarted(id=call_id, tool_name=name, initial_input=initial_input)]

        if block_type == "web_search_tool_result":
            return self._on_web_search_result(block)

        if block_type == "mcp_tool_result":
            call_id = block.get("tool_use_id")
            if not call_id:
                return []
            call = self._complete_call(call_id)
            result = {
                "is_error": bool(block.get("is_error")),
                "content": _tool_result_text(block.get("content")),
            }
            return [ToolCallResult(id=call_id, tool_name=call.name if call else "mcp_tool", result=result)]

        return []

    def _on_block_delta(self, event: dict[str, Any]) -> list[RelayEvent]:
        delta = event.get("delta") or {}
        delta_type = delta.get("type")

        if delta_type == "text_delta":
            return self._append_text(delta.get("text") or "")

        if delta_type == "input_json_delta":
            fragment = delta.get("partial_json") or ""
            call_id = self.state.block_calls.get(event.get("index"))
            call = self.state.in_flight_tool_calls.get(call_id) if call_id else None
            if call is None:
                logger.debug("Input fragment for unknown content block ignored")
                return []
            if not fragment:
                return []
            call.accumulated_input_json += fragment
            return [ToolCallInputChunk(id=call_id, partial_json_fragment=fragment)]

        return []

    def _on_block_stop(self, event: dict[str, Any]) -> list[RelayEvent]:
        call_id = self.state.block_calls.get(event.get("index"))
        call = self.state.in_flight_tool_calls.get(call_id) if call_id else None
        if call is None or call.complete or call.block_type != LOCAL_TOOL_BLOCK:
            # Provider-side tools deliver their result in a later block
            return []

        call.complete = True
        raw = call.accumulated_input_json.strip()
        if raw:
            try:
                tool_input = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(f"Tool {call.name} input is not valid JSON: {e}")
                result = {"success": False, "error": "Tool input was not valid JSON"}
                return [ToolCallResult(id=call_id, tool_name=call.name, result=result)]
        else:
            tool_input = call.initial_input

        logger.info(f"Executing local tool: {call.name}")
        result = self._execute_tool(call.name, tool_input)
        return [ToolCallResult(id=call_id, tool_name=call.name, result=result)]

    def _on_web_search_result(self, payload: dict[str, Any]) -> list[RelayEvent]:
        call_id = payload.get("tool_use_id")
        if not call_id:
            return []
        call = self._complete_call(call_id)
        results = normalize_search_results(payload.get("content"))
        logger.info(f"Web search result received: {len(results)} results")
        return [ToolCallResult(id=call_id, tool_name=call.name if call else "web_search", result=results)]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _append_text(self, text: str) -> list[RelayEvent]:
        if not text:
            return []
        self.state.accumulated_text += text
        return [TextDelta(text=text)]

    def _complete_call(self, call_id: str) -> Optional[ToolCallState]:
        call = self.state.in_flight_tool_calls.get(call_id)
        if call is not None:
            call.complete = True
        return call

    # =========================================================================
    # Driver
    # =========================================================================

    async def run(
        self,
        stream: ProviderStream,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[RelayEvent]:
        """Consume a provider stream and yield relay events in arrival order.

        The stream is always closed on exit. Setting ``cancel`` cuts a
        pending read short; the relay then yields nothing further.

        Args:
            stream: Open provider stream from the gateway
            cancel: Cooperative cancellation flag set by the transport

        Yields:
            RelayEvent instances, ending with Done unless cancelled
        """
        events = stream.__aiter__()
        try:
            while True:
                event = await _next_event(events, cancel)
                if event is _CANCELLED:
                    logger.info("Relay cancelled, releasing provider stream")
                    return
                if event is _EXHAUSTED:
                    break
                for relay_event in self.translate(event):
                    yield relay_event
                if self.phase is RelayPhase.TERMINATED:
                    return
            for relay_event in self.fail("Provider stream ended before the message completed"):
                yield relay_event
        except StreamReadError as e:
            for relay_event in self.fail(f"Streaming error: {e.message}"):
                yield relay_event
        finally:
            await stream.aclose()


_CANCELLED = object()
_EXHAUSTED = object()


async def _next_event(events: AsyncIterator[dict[str, Any]], cancel: Optional[asyncio.Event]) -> Any:
    """Read one provider event, or return _CANCELLED as soon as cancel is set."""
    if cancel is None:
        try:
            return await events.__anext__()
        except StopAsyncIteration:
            return _EXHAUSTED
    if cancel.is_set():
        return _CANCELLED

    read = asyncio.ensure_future(events.__anext__())
    cancelled = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({read, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (read, cancelled):
            if not task.done():
                task.cancel()
    if not read.done() or read.cancelled():
        return _CANCELLED
    try:
        return read.result()
    except StopAsyncIteration:
        return _EXHAUSTED
