"""
Tests for the local workflow tools
"""

import pytest

from workflow_ai.generator.tools import TOOL_DECLARATIONS, TOOL_HANDLERS, execute_tool, is_local_tool
from workflow_ai.generator.tools.api_analyzer import analyze_api
from workflow_ai.generator.tools.templates import PATTERN_TYPES, generate_template, service_node_type
from workflow_ai.generator.tools.validator import validate_workflow


def main_link(target: str) -> dict:
    return {"main": [[{"node": target, "type": "main", "index": 0}]]}


class TestRegistry:
    """Test handler registry and dispatch."""

    def test_declarations_match_handlers(self):
        assert {d["name"] for d in TOOL_DECLARATIONS} == set(TOOL_HANDLERS)

    def test_is_local_tool(self):
        assert is_local_tool("workflow_validator") is True
        assert is_local_tool("web_search") is False

    def test_non_object_input(self):
        assert execute_tool("workflow_validator", ["not", "a", "dict"]) == {
            "success": False,
            "error": "Tool input must be a JSON object",
        }

    def test_unexpected_argument(self):
        result = execute_tool("api_documentation_analyzer", {"service_name": "Slack", "colour": "blue"})
        assert result["success"] is False

    def test_handler_value_error(self):
        result = execute_tool("workflow_template_generator", {"pattern_type": "teleport"})
        assert result["success"] is False
        assert "teleport" in result["error"]


class TestTemplateGenerator:
    """Test workflow_template_generator."""

    @pytest.mark.parametrize("pattern_type", PATTERN_TYPES)
    def test_every_pattern_chains_nodes(self, pattern_type):
        workflow = generate_template(pattern_type)["workflow"]
        names = [n["name"] for n in workflow["nodes"]]
        assert len(names) >= 3
        assert set(workflow["connections"]) == set(names[:-1])

    def test_services_and_trigger(self):
        result = generate_template("data_sync", "Google Sheets", "Slack", trigger_type="scheduled")
        types = [n["type"] for n in result["workflow"]["nodes"]]
        assert types[0] == "n8n-nodes-base.scheduleTrigger"
        assert "n8n-nodes-base.googleSheets" in types
        assert "n8n-nodes-base.slack" in types

    def test_unknown_trigger(self):
        with pytest.raises(ValueError):
            generate_template("notification", trigger_type="telepathy")

    def test_unknown_service_uses_http(self):
        assert service_node_type("Acme CRM") == "n8n-nodes-base.httpRequest"

    def test_template_validates_cleanly(self):
        workflow = generate_template("webhook_handler", target_service="Airtable")["workflow"]
        report = validate_workflow(workflow, "logic")
        assert report["summary"]["errors"] == 0


class TestValidator:
    """Test workflow_validator."""

    def test_syntax_errors_scored(self):
        report = validate_workflow({"nodes": [{"name": "A"}]}, "syntax")
        # missing name, node id, node type; missing position and connections
        assert report["summary"]["errors"] == 3
        assert report["summary"]["warnings"] == 2
        assert report["summary"]["score"] == 30

    def test_logic_unknown_node_and_orphan(self):
        workflow = {
            "name": "w",
            "nodes": [
                {"id": "1", "name": "Start", "type": "n8n-nodes-base.manualTrigger"},
                {"id": "2", "name": "Lonely", "type": "n8n-nodes-base.set"},
            ],
            "connections": {"Start": {"main": [[{"node": "Ghost", "type": "main", "index": 0}]]}},
        }
        issues = validate_workflow(workflow, "logic")["results"]["logic"]
        messages = [i["message"] for i in issues]
        assert any("Ghost" in m for m in messages)
        assert any("Lonely" in m and "orphaned" in m for m in messages)

    def test_cycle_detected(self):
        workflow = {
            "name": "loop",
            "nodes": [
                {"id": "1", "name": "A", "type": "t"},
                {"id": "2", "name": "B", "type": "t"},
            ],
            "connections": {"A": main_link("B"), "B": main_link("A")},
        }
        issues = validate_workflow(workflow, "performance")["results"]["performance"]
        assert any("Circular" in i["message"] for i in issues)

    def test_hardcoded_secret(self):
        workflow = {
            "name": "w",
            "nodes": [{"id": "1", "name": "Call", "type": "n8n-nodes-base.httpRequest",
                       "parameters": {"headers": {"api_key": "abc123"}}}],
        }
        issues = validate_workflow(workflow, "security")["results"]["security"]
        levels = sorted(i["level"] for i in issues)
        assert levels == ["info", "warning"]

    def test_all_runs_every_category(self, sheets_to_slack):
        results = validate_workflow(sheets_to_slack, "all")["results"]
        assert set(results) == {"syntax", "logic", "performance", "security", "overall_score"}

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            validate_workflow({}, "vibes")


class TestApiAnalyzer:
    """Test api_documentation_analyzer."""

    def test_known_service(self):
        result = analyze_api("Slack", "post")
        assert result["known_service"] is True
        assert result["operation_type"] == "POST"
        config = result["suggested_nodes"][0]["config"]
        assert config["url"] == "https://slack.com/api/endpoint"
        assert config["sendBody"] is True

    def test_unknown_service_with_update(self):
        result = analyze_api("Acme CRM", "PATCH")
        assert result["known_service"] is False
        assert result["suggested_nodes"][0]["config"]["url"] == "https://api.service.com/endpoint/{{$json.id}}"

    def test_bad_operation(self):
        with pytest.raises(ValueError):
            analyze_api("Slack", "FETCH")
