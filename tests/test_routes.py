"""
Tests for the HTTP routes and SSE framing
"""

import asyncio
import base64
import json
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from provider_events import (
    FakeStreamHandle,
    StallingStreamHandle,
    error_event,
    fenced,
    message_start,
    text_delta,
    text_start,
    text_stream,
)
from workflow_ai.config import Settings, get_settings
from workflow_ai.errors import GatewayError, GatewayErrorKind
from workflow_ai.infrastructure import ToolServerProvider
from workflow_ai.main import create_app
from workflow_ai.schemas import ToolServerDescriptor


class StubGateway:
    """Records open() calls and replays a canned provider stream."""

    def __init__(
        self,
        events: Optional[list[dict[str, Any]]] = None,
        error: Optional[GatewayError] = None,
        stall: bool = False,
    ):
        self.events = events or []
        self.error = error
        self.stall = stall
        self.calls: list[dict[str, Any]] = []
        self.handles: list[FakeStreamHandle] = []

    async def open(self, system_prompt, messages, plan, model=None):
        self.calls.append({"system": system_prompt, "messages": messages, "plan": plan, "model": model})
        if self.error is not None:
            raise self.error
        handle = (StallingStreamHandle if self.stall else FakeStreamHandle)(self.events)
        self.handles.append(handle)
        return handle


def make_client(registry, gateway: StubGateway, tool_servers: Optional[ToolServerProvider] = None) -> TestClient:
    app = create_app()
    app.state.model_registry = registry
    app.state.gateway = gateway
    app.state.tool_servers = tool_servers or ToolServerProvider()
    return TestClient(app)


def frames(body: str) -> list[Any]:
    """Split an SSE body into decoded data payloads; [DONE] stays a string."""
    payloads = []
    for frame in body.split("\n\n"):
        if not frame:
            continue
        assert frame.startswith("data: ")
        data = frame[len("data: "):]
        payloads.append(data if data == "[DONE]" else json.loads(data))
    return payloads


class TestGenerate:
    """Test POST /api/workflows/generate."""

    def test_generate_streams_text_then_workflow(self, registry, sheets_to_slack):
        answer = f"Here's your automation:\n{fenced(sheets_to_slack)}\nAdd your Slack credential."
        gateway = StubGateway(text_stream(answer[:40], answer[40:]))
        client = make_client(registry, gateway)

        response = client.post(
            "/api/workflows/generate",
            json={"message": "sync Google Sheets to Slack every hour", "action": "generate"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        payloads = frames(response.text)
        assert payloads[-1] == "[DONE]"
        assert payloads[-2]["type"] == "workflow"
        assert [p["type"] for p in payloads[:-2]] == ["text", "text"]
        assert "".join(p["content"] for p in payloads[:-2]) == answer

        node_types = [n["type"] for n in payloads[-2]["content"]["nodes"]]
        assert any("scheduleTrigger" in t for t in node_types)
        assert any("slack" in t.lower() for t in node_types)

        call = gateway.calls[0]
        assert "GENERATE" in call["system"]
        assert call["messages"][-1] == {
            "role": "user",
            "content": "Build n8n automation: sync Google Sheets to Slack every hour",
        }
        assert gateway.handles[0].closed

    def test_analyze_embeds_existing_document(self, registry, sheets_to_slack):
        gateway = StubGateway(text_stream("Looks fine."))
        client = make_client(registry, gateway)

        response = client.post(
            "/api/workflows/generate",
            json={"message": "any issues?", "action": "analyze", "selectedWorkflow": sheets_to_slack},
        )

        assert response.status_code == 200
        assert json.dumps(sheets_to_slack, indent=2) in gateway.calls[0]["system"]

    def test_mid_stream_error(self, registry, sheets_to_slack):
        events = [message_start(), text_start(), text_delta(fenced(sheets_to_slack)), error_event("Overloaded")]
        client = make_client(registry, StubGateway(events))

        payloads = frames(client.post("/api/workflows/generate", json={"message": "hi"}).text)

        types = [p if p == "[DONE]" else p["type"] for p in payloads]
        assert types.count("error") == 1
        assert "workflow" not in types
        assert types[-2:] == ["error", "[DONE]"]

    def test_gateway_error_streamed(self, registry):
        error = GatewayError(GatewayErrorKind.UNAUTHORIZED, "Provider rejected the API key", status_code=401)
        client = make_client(registry, StubGateway(error=error))

        response = client.post("/api/workflows/generate", json={"message": "hi"})

        assert response.status_code == 200
        assert frames(response.text) == [
            {"type": "error", "content": "Generation failed: Provider rejected the API key"},
            "[DONE]",
        ]

    def test_history_and_alias_fields(self, registry):
        gateway = StubGateway(text_stream("ok"))
        client = make_client(registry, gateway)

        client.post(
            "/api/workflows/generate",
            json={
                "message": "  and now email me  ",
                "chatHistory": [
                    {"role": "user", "content": "make a flow"},
                    {"role": "assistant", "content": "done"},
                ],
                "credentials": {"Gmail account": {"secret": "never-sent"}},
                "action": "unknown-action",
            },
        )

        call = gateway.calls[0]
        assert [m["role"] for m in call["messages"]] == ["user", "assistant", "user"]
        assert call["messages"][-1]["content"] == "and now email me"
        assert "Gmail account" in call["system"]
        assert "never-sent" not in call["system"]

    def test_configured_tool_servers_used_by_default(self, registry):
        configured = ToolServerDescriptor(endpointUrl="https://gh.example/mcp", displayName="github")
        gateway = StubGateway(text_stream("ok"))
        client = make_client(registry, gateway, ToolServerProvider(defaults=[configured]))

        client.post("/api/workflows/generate", json={"message": "hi"})
        client.post("/api/workflows/generate", json={"message": "hi", "toolServers": []})

        assert [s.display_name for s in gateway.calls[0]["plan"].tool_servers] == ["github"]
        assert gateway.calls[0]["plan"].max_web_search_uses == 5
        assert gateway.calls[1]["plan"].tool_servers == ()

    def test_empty_message_rejected(self, registry):
        client = make_client(registry, StubGateway())
        assert client.post("/api/workflows/generate", json={"message": "   "}).status_code == 422

    def test_unknown_model_rejected(self, registry):
        gateway = StubGateway()
        client = make_client(registry, gateway)
        response = client.post("/api/workflows/generate", json={"message": "hi", "model": "gpt-2"})
        assert response.status_code == 422
        assert gateway.calls == []

    async def test_client_disconnect_releases_stream(self, registry):
        gateway = StubGateway([message_start(), text_start(), text_delta("Thinking")], stall=True)
        app = make_client(registry, gateway).app
        body = json.dumps({"message": "hi"}).encode()
        pending = [{"type": "http.request", "body": body, "more_body": False}]
        first_frame_sent = asyncio.Event()
        sent: list[dict[str, Any]] = []

        async def receive():
            if pending:
                return pending.pop(0)
            await first_frame_sent.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            sent.append(message)
            if message["type"] == "http.response.body" and message.get("body"):
                first_frame_sent.set()

        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": "/api/workflows/generate",
            "raw_path": b"/api/workflows/generate",
            "root_path": "",
            "query_string": b"",
            "headers": [(b"content-type", b"application/json"), (b"content-length", str(len(body)).encode())],
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
            "state": {},
        }

        await asyncio.wait_for(app(scope, receive, send), timeout=5)

        chunks = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body").decode()
        assert frames(chunks) == [{"type": "text", "content": "Thinking"}]
        assert gateway.handles[0].closed


class TestAuth:
    """Test Easy Auth identity handling."""

    @pytest.fixture
    def easyauth_client(self, registry):
        client = make_client(registry, StubGateway(text_stream("ok")))
        client.app.dependency_overrides[get_settings] = lambda: Settings(auth_mode="easyauth")
        return client

    def test_local_mode_user(self, registry):
        client = make_client(registry, StubGateway())
        client.app.dependency_overrides[get_settings] = lambda: Settings(auth_mode="local")
        user = client.get("/api/user").json()
        assert user["mode"] == "local"
        assert user["is_authenticated"] is True

    def test_user_lists_tool_server_names(self, registry):
        personal = ToolServerDescriptor(endpointUrl="https://gh.example/mcp", displayName="github", authToken="secret")
        settings = Settings(auth_mode="local", local_test_client_id="u-1")
        client = make_client(registry, StubGateway(), ToolServerProvider(per_user={"u-1": [personal]}))
        client.app.dependency_overrides[get_settings] = lambda: settings

        response = client.get("/api/user")

        assert response.json()["tool_servers"] == ["github"]
        assert "secret" not in response.text
        assert "gh.example" not in response.text

    def test_easyauth_requires_headers(self, easyauth_client):
        assert easyauth_client.get("/api/user").status_code == 401
        assert easyauth_client.post("/api/workflows/generate", json={"message": "hi"}).status_code == 401

    def test_easyauth_principal(self, easyauth_client):
        principal = {"claims": [{"typ": "name", "val": "Ada Lovelace"}]}
        headers = {
            "x-ms-client-principal-id": "user-123",
            "x-ms-client-principal-name": "ada@example.com",
            "x-ms-client-principal": base64.b64encode(json.dumps(principal).encode()).decode(),
        }
        user = easyauth_client.get("/api/user", headers=headers).json()
        assert user["user_id"] == "user-123"
        assert user["user_name"] == "Ada Lovelace"
        assert user["first_name"] == "Ada"
        assert user["principal_name"] == "ada@example.com"

    def test_easyauth_garbled_principal(self, easyauth_client):
        headers = {"x-ms-client-principal-id": "user-123", "x-ms-client-principal": "%%%"}
        user = easyauth_client.get("/api/user", headers=headers).json()
        assert user["user_name"] == "Unknown user"


class TestMisc:
    """Test catalogue and health endpoints."""

    def test_models(self, registry):
        body = make_client(registry, StubGateway()).get("/api/models").json()
        assert body["default"] == "claude-sonnet-4"
        assert {"name": "claude-sonnet-4", "display_name": "Claude Sonnet 4"} in body["models"]

    def test_health(self, registry):
        assert make_client(registry, StubGateway()).get("/health").json() == {"status": "healthy"}
