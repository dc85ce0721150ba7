"""Model gateway: the single outbound streaming call to Anthropic.

The gateway builds and issues the request and hands back the raw event
stream. It does not look inside the events; that is the relay's job.
"""

import logging
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

import anthropic
import httpx
from opentelemetry import trace

from ..errors import GatewayError, GatewayErrorKind, StreamReadError
from ..schemas.generation import ChatTurn, ToolServerDescriptor
from .model_registry import ModelRegistry
from .tool_router import ToolPlan
from .tools import TOOL_DECLARATIONS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

WEB_SEARCH_TOOL_TYPE = "web_search_20250305"
MCP_CLIENT_BETA = "mcp-client-2025-04-04"
DEFAULT_TEMPERATURE = 0.3


class ProviderStream(Protocol):
    """What the relay needs from an open provider stream."""

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]: ...

    async def aclose(self) -> None: ...


class StreamHandle:
    """Open provider stream yielding provider-native events as plain dicts.

    A provider-reported error inside the stream is yielded as an ``error``
    event. Transport failures raise StreamReadError.
    """

    def __init__(self, stream: Any, model_id: str):
        self._stream = stream
        self.model_id = model_id
        self._closed = False

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        try:
            async for event in self._stream:
                yield event.model_dump(mode="json")
        except anthropic.APIStatusError as e:
            yield {"type": "error", "error": _error_payload(e)}
        except (anthropic.APIConnectionError, httpx.HTTPError) as e:
            raise StreamReadError(f"Provider stream interrupted: {e}", cause=e) from e

    async def aclose(self) -> None:
        """Release the underlying HTTP response. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._stream.close()


def _error_payload(error: anthropic.APIStatusError) -> dict[str, Any]:
    body = error.body
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {"type": "api_error", "message": error.message}


def web_search_tool(max_uses: int) -> dict[str, Any]:
    return {"type": WEB_SEARCH_TOOL_TYPE, "name": "web_search", "max_uses": max_uses}


def tool_server_declaration(server: ToolServerDescriptor) -> dict[str, Any]:
    declaration: dict[str, Any] = {
        "type": "url",
        "url": server.endpoint_url,
        "name": server.display_name,
    }
    if server.auth_token:
        declaration["authorization_token"] = server.auth_token
    tool_configuration: dict[str, Any] = {"enabled": True}
    if server.enabled_tools:
        tool_configuration["allowed_tools"] = list(server.enabled_tools)
    declaration["tool_configuration"] = tool_configuration
    return declaration


class ModelGateway:
    """Issues streaming requests to the Anthropic Messages API."""

    def __init__(
        self,
        registry: ModelRegistry,
        base_url: Optional[str] = None,
        temperature: Optional[float] = DEFAULT_TEMPERATURE,
        custom_tools_enabled: bool = False,
        client: Optional[anthropic.AsyncAnthropic] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the gateway.

        The client never retries on its own; a failed call is reported once
        and retry policy is left to the caller.

        Args:
            registry: Model registry holding the provider key
            base_url: Optional API base URL override
            temperature: Sampling temperature for every request; None leaves the provider default
            custom_tools_enabled: Declare the local workflow tools to the model
            client: Pre-built client, mainly for tests
            http_client: Optional httpx client for the built Anthropic client
        """
        self._registry = registry
        self._temperature = temperature
        self._custom_tools_enabled = custom_tools_enabled
        self._client = client or anthropic.AsyncAnthropic(
            api_key=registry.get().api_key,
            base_url=base_url,
            max_retries=0,
            http_client=http_client,
        )

    def build_request(
        self,
        system_prompt: str,
        messages: Sequence[dict[str, Any]],
        plan: ToolPlan,
        model: Optional[str] = None,
    ) -> dict[str, Any]:
        """Build keyword arguments for ``messages.create``.

        Raises:
            KeyError: If model is not in the registry
        """
        config = self._registry.get(model)

        tools: list[dict[str, Any]] = []
        if plan.use_web_search and config.supports_web_search:
            tools.append(web_search_tool(plan.max_web_search_uses))
        if self._custom_tools_enabled:
            tools.extend(TOOL_DECLARATIONS)

        request: dict[str, Any] = {
            "model": config.model_id,
            "max_tokens": config.max_tokens,
            "system": system_prompt,
            "messages": list(messages),
            "stream": True,
        }
        if self._temperature is not None:
            request["temperature"] = self._temperature
        if tools:
            request["tools"] = tools
        if plan.tool_servers:
            request["mcp_servers"] = [tool_server_declaration(s) for s in plan.tool_servers]
            request["betas"] = [MCP_CLIENT_BETA]
        return request

    async def open(
        self,
        system_prompt: str,
        messages: Sequence[dict[str, Any]],
        plan: ToolPlan,
        model: Optional[str] = None,
    ) -> StreamHandle:
        """Open one streaming request.

        Args:
            system_prompt: Prompt from the prompt builder
            messages: Ordered history ending with the user prompt
            plan: Tool decisions from the tool router
            model: Registry model name; None uses the default

        Returns:
            StreamHandle over provider-native events

        Raises:
            GatewayError: unauthorized, provider_unavailable or invalid_request
        """
        try:
            request = self.build_request(system_prompt, messages, plan, model)
        except KeyError as e:
            raise GatewayError(GatewayErrorKind.INVALID_REQUEST, f"Unknown model: {model}", cause=e) from e

        tool_names = [t["name"] for t in request.get("tools", [])]
        logger.info(
            f"Calling Anthropic model {request['model']} with tools {tool_names} "
            f"and {len(plan.tool_servers)} tool servers"
        )

        with tracer.start_as_current_span("anthropic.messages.create") as span:
            span.set_attribute("gen_ai.request.model", request["model"])
            span.set_attribute("gen_ai.request.max_tokens", request["max_tokens"])
            try:
                stream = await self._client.beta.messages.create(**request)
            except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
                logger.error(f"Anthropic rejected credentials: {e.status_code}")
                raise GatewayError(
                    GatewayErrorKind.UNAUTHORIZED, "Provider rejected the API key",
                    status_code=e.status_code, cause=e,
                ) from e
            except (anthropic.BadRequestError, anthropic.UnprocessableEntityError, anthropic.NotFoundError) as e:
                logger.error(f"Anthropic rejected request: {e.status_code} {e.message}")
                raise GatewayError(
                    GatewayErrorKind.INVALID_REQUEST, e.message,
                    status_code=e.status_code, cause=e,
                ) from e
            except anthropic.APIStatusError as e:
                logger.error(f"Anthropic API error: {e.status_code} {e.message}")
                raise GatewayError(
                    GatewayErrorKind.PROVIDER_UNAVAILABLE, e.message,
                    status_code=e.status_code, cause=e,
                ) from e
            except anthropic.APIConnectionError as e:
                logger.error(f"Anthropic API unreachable: {e}")
                raise GatewayError(
                    GatewayErrorKind.PROVIDER_UNAVAILABLE, "Provider unreachable", cause=e,
                ) from e

        logger.info("Anthropic stream opened")
        return StreamHandle(stream, request["model"])


def build_messages(history: Sequence[ChatTurn], user_prompt: str) -> list[dict[str, Any]]:
    """Convert caller history plus the new user prompt into provider messages."""
    messages = [{"role": turn.role, "content": turn.content} for turn in history]
    messages.append({"role": "user", "content": user_prompt})
    return messages
