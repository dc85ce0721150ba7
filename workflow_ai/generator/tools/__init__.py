"""Local tools the model can call during generation.

Handlers are pure functions: no network or storage I/O. They run inline in
the relay once a tool call's input is complete.
"""

import logging
from typing import Any, Callable

from .api_analyzer import OPERATION_TYPES, analyze_api
from .templates import PATTERN_TYPES, TRIGGER_NODES, generate_template
from .validator import VALIDATION_TYPES, validate_workflow

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., dict[str, Any]]

TOOL_HANDLERS: dict[str, ToolHandler] = {
    "workflow_template_generator": generate_template,
    "workflow_validator": validate_workflow,
    "api_documentation_analyzer": analyze_api,
}

TOOL_DECLARATIONS: list[dict[str, Any]] = [
    {
        "name": "workflow_template_generator",
        "description": (
            "Generate an n8n workflow template for a common automation pattern. "
            "Always provide pattern_type."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "pattern_type": {"type": "string", "enum": list(PATTERN_TYPES)},
                "source_service": {"type": "string", "description": "Where data comes from, e.g. 'Google Sheets'"},
                "target_service": {"type": "string", "description": "Where data goes to, e.g. 'Slack'"},
                "trigger_type": {"type": "string", "enum": list(TRIGGER_NODES)},
                "custom_requirements": {"type": "string"},
            },
            "required": ["pattern_type"],
        },
    },
    {
        "name": "workflow_validator",
        "description": "Validate workflow structure and logic and suggest fixes",
        "input_schema": {
            "type": "object",
            "properties": {
                "workflow": {"type": "object"},
                "validation_type": {"type": "string", "enum": list(VALIDATION_TYPES)},
            },
            "required": ["workflow"],
        },
    },
    {
        "name": "api_documentation_analyzer",
        "description": "Suggest n8n HTTP Request node configuration for a service API",
        "input_schema": {
            "type": "object",
            "properties": {
                "service_name": {"type": "string"},
                "operation_type": {"type": "string", "enum": list(OPERATION_TYPES)},
                "api_url": {"type": "string"},
                "documentation_url": {"type": "string"},
            },
            "required": ["service_name"],
        },
    },
]


def is_local_tool(name: str) -> bool:
    return name in TOOL_HANDLERS


def execute_tool(name: str, tool_input: Any) -> dict[str, Any]:
    """Run a local tool and return its result.

    Failures are returned as ``{"success": False, "error": ...}`` so the
    relay can forward them like any other result.
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return {"success": False, "error": f"Unknown tool: {name}"}
    if not isinstance(tool_input, dict):
        return {"success": False, "error": "Tool input must be a JSON object"}
    try:
        return handler(**tool_input)
    except (TypeError, ValueError) as e:
        logger.warning(f"Tool {name} rejected input: {e}")
        return {"success": False, "error": str(e)}
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return {"success": False, "error": f"Tool {name} failed: {e}"}


__all__ = [
    "TOOL_DECLARATIONS",
    "TOOL_HANDLERS",
    "execute_tool",
    "is_local_tool",
    "analyze_api",
    "generate_template",
    "validate_workflow",
]
