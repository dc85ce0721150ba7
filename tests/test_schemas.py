"""
Tests for request and document schemas
"""

import pytest
from pydantic import ValidationError

from workflow_ai.schemas import GenerationRequest, NodeSpec, ToolServerDescriptor, WorkflowDocument


class TestGenerationRequest:
    """Test request parsing and coercion."""

    def test_defaults(self):
        request = GenerationRequest(message="hello")
        assert request.action == "chat"
        assert request.history == []
        assert request.credential_hints == []
        assert request.tool_servers is None
        assert request.existing_document is None

    def test_camel_case_fields(self):
        request = GenerationRequest.model_validate({
            "message": "fix it",
            "action": "edit",
            "existingDocument": {"nodes": []},
            "credentialHints": ["Slack", "Slack", "Gmail"],
            "toolServers": [{"endpointUrl": "https://x/mcp", "displayName": "x", "toolsEnabled": False}],
        })
        assert request.action == "edit"
        assert request.existing_document == {"nodes": []}
        assert request.credential_hints == ["Slack", "Gmail"]
        assert request.tool_servers[0].tools_enabled is False

    def test_blank_message(self):
        with pytest.raises(ValidationError):
            GenerationRequest(message="  \n ")

    def test_null_action(self):
        assert GenerationRequest.model_validate({"message": "m", "action": None}).action == "chat"


class TestToolServerDescriptor:
    """Test descriptor aliases."""

    def test_original_field_names(self):
        server = ToolServerDescriptor.model_validate({
            "url": "https://x/mcp",
            "name": "x",
            "authorization_token": "t",
            "allowed_tools": ["a"],
        })
        assert server.endpoint_url == "https://x/mcp"
        assert server.auth_token == "t"
        assert server.enabled_tools == ["a"]
        assert server.model_dump(by_alias=True)["endpointUrl"] == "https://x/mcp"


class TestWorkflowDocument:
    """Test the typed workflow document."""

    def test_requires_nodes(self):
        with pytest.raises(ValidationError):
            WorkflowDocument(name="empty", nodes=[])

    def test_round_trip_keys(self):
        node = NodeSpec(id="a", name="A", type="t", position=(300, 300), notes="keep me")
        document = WorkflowDocument(name="w", nodes=[node], staticData={"k": 1})
        data = document.to_dict()
        assert data["staticData"] == {"k": 1}
        assert data["nodes"][0]["typeVersion"] == 1
        assert data["nodes"][0]["notes"] == "keep me"
        assert document.node_names == ["A"]

    def test_frozen(self):
        node = NodeSpec(id="a", name="A", type="t", position=(0, 0))
        with pytest.raises(ValidationError):
            node.name = "B"
