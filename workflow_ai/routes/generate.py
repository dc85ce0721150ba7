"""Workflow generation route: one request, one SSE stream of relay events."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from ..dependencies import (
    CurrentUserDep,
    GatewayDep,
    ModelRegistryDep,
    SettingsDep,
    ToolServerProviderDep,
)
from ..errors import GatewayError
from ..generator import StreamRelay, build, build_messages, decide
from ..schemas import Done, Error, GenerationRequest
from ..utils import SSE_HEADERS, encode_event

logger = logging.getLogger(__name__)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.5


@router.post("/workflows/generate")
async def generate_workflow(
    body: GenerationRequest,
    request: Request,
    settings: SettingsDep,
    registry: ModelRegistryDep,
    gateway: GatewayDep,
    tool_server_provider: ToolServerProviderDep,
    current_user: CurrentUserDep,
):
    """Stream a model response, tool activity and the extracted workflow via SSE.

    Events emitted (one ``data:`` frame each):
    - text: assistant text deltas
    - tool_call_start / tool_call_input / tool_call_result: tool activity
    - workflow: extracted workflow document, at most once, at the end
    - error: fatal failure, no workflow follows
    - [DONE]: stream complete

    Args:
        body: GenerationRequest with message, history and action

    Returns:
        StreamingResponse with SSE events

    Raises:
        HTTPException: 422 if the requested model is not in the registry
    """
    if body.model and not registry.has(body.model):
        raise HTTPException(status_code=422, detail=f"Unknown model: {body.model}")

    tool_servers = tool_server_provider.resolve(current_user.user_id, body.tool_servers)
    prompt = build(
        body.action,
        existing_document=body.existing_document,
        credential_hints=body.credential_hints,
        tool_servers=tool_servers,
    )
    plan = decide(
        body.message,
        body.action,
        tool_servers,
        default_uses=settings.web_search_default_uses,
        tool_server_uses=settings.web_search_tool_server_uses,
    )
    messages = build_messages(body.history, prompt.user_prompt(body.message))

    logger.info(
        f"Generation request from {current_user.user_id}: action={body.action}, "
        f"history={len(body.history)}, web_search={plan.use_web_search}, "
        f"tool_servers={[s.display_name for s in plan.tool_servers]}"
    )

    async def event_generator():
        """Open the provider stream and relay its events."""
        try:
            handle = await gateway.open(prompt.system, messages, plan, body.model)
        except GatewayError as e:
            logger.error(f"Could not open provider stream: {e}")
            yield encode_event(Error(message=f"Generation failed: {e.message}"))
            yield encode_event(Done())
            return

        cancel = asyncio.Event()
        watcher = asyncio.create_task(watch_disconnect(request, cancel))
        relay_events = StreamRelay().run(handle, cancel)
        try:
            async for event in relay_events:
                yield encode_event(event)
        finally:
            watcher.cancel()
            await relay_events.aclose()
            await handle.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def watch_disconnect(request: Request, cancel: asyncio.Event) -> None:
    """Set cancel once the client has gone away."""
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling generation")
            cancel.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)
