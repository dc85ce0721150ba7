"""workflow_template_generator: template workflows for common patterns."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

PATTERN_TYPES = (
    "data_sync",
    "notification",
    "file_processing",
    "api_integration",
    "scheduled_task",
    "webhook_handler",
)

# n8n node types for services the templates know by name
SERVICE_NODE_TYPES: dict[str, str] = {
    "google sheets": "n8n-nodes-base.googleSheets",
    "airtable": "n8n-nodes-base.airtable",
    "slack": "n8n-nodes-base.slack",
    "gmail": "n8n-nodes-base.gmail",
    "discord": "n8n-nodes-base.discord",
    "hubspot": "n8n-nodes-base.hubspot",
    "stripe": "n8n-nodes-base.stripe",
    "notion": "n8n-nodes-base.notion",
}

TRIGGER_NODES: dict[str, tuple[str, str, dict[str, Any]]] = {
    "manual": ("Manual Trigger", "n8n-nodes-base.manualTrigger", {}),
    "scheduled": (
        "Schedule Trigger",
        "n8n-nodes-base.scheduleTrigger",
        {"rule": {"interval": [{"field": "hours", "hoursInterval": 1}]}},
    ),
    "webhook": (
        "Webhook",
        "n8n-nodes-base.webhook",
        {"httpMethod": "POST", "path": "incoming", "responseMode": "onReceived"},
    ),
    "file_change": (
        "Local File Trigger",
        "n8n-nodes-base.localFileTrigger",
        {"triggerOn": "folder", "path": "/data/inbox"},
    ),
    "email": (
        "Email Trigger",
        "n8n-nodes-base.emailReadImap",
        {"mailbox": "INBOX"},
    ),
}

DEFAULT_TRIGGERS: dict[str, str] = {
    "data_sync": "scheduled",
    "notification": "webhook",
    "file_processing": "file_change",
    "api_integration": "manual",
    "scheduled_task": "scheduled",
    "webhook_handler": "webhook",
}


def service_node_type(service: Optional[str]) -> str:
    """Map a service name to its n8n node type, falling back to HTTP Request."""
    if service:
        lowered = service.lower()
        for key, node_type in SERVICE_NODE_TYPES.items():
            if key in lowered:
                return node_type
    return "n8n-nodes-base.httpRequest"


def _node(index: int, name: str, node_type: str, parameters: dict[str, Any]) -> dict[str, Any]:
    return {
        "parameters": parameters,
        "id": f"node-{index + 1}",
        "name": name,
        "type": node_type,
        "typeVersion": 1,
        "position": [300 + index * 200, 300],
        "continueOnFail": False,
        "retryOnFail": True,
        "maxTries": 3,
    }


def _chain(names: list[str]) -> dict[str, Any]:
    return {
        source: {"main": [[{"node": target, "type": "main", "index": 0}]]}
        for source, target in zip(names, names[1:])
    }


def _middle_steps(pattern_type: str, source: str, target: str) -> list[tuple[str, str, dict[str, Any]]]:
    if pattern_type == "data_sync":
        return [
            (f"Read {source}", service_node_type(source), {"operation": "read"}),
            ("Filter New Rows", "n8n-nodes-base.filter", {"conditions": {}}),
            (f"Write {target}", service_node_type(target), {"operation": "append"}),
        ]
    if pattern_type == "notification":
        return [
            ("Format Message", "n8n-nodes-base.set", {"values": {"string": [{"name": "text", "value": "={{$json.message}}"}]}}),
            (f"Notify {target}", service_node_type(target), {"operation": "post", "text": "={{$json.text}}"}),
        ]
    if pattern_type == "file_processing":
        return [
            ("Read File", "n8n-nodes-base.readBinaryFile", {"filePath": "={{$json.path}}"}),
            ("Convert File", "n8n-nodes-base.spreadsheetFile", {"operation": "fromFile"}),
            (f"Upload to {target}", service_node_type(target), {"operation": "upload"}),
        ]
    if pattern_type == "api_integration":
        return [
            (f"Call {source}", "n8n-nodes-base.httpRequest", {"method": "GET", "url": "https://api.example.com/resource"}),
            ("Transform Response", "n8n-nodes-base.code", {"jsCode": "return items;"}),
            (f"Send to {target}", service_node_type(target), {"operation": "create"}),
        ]
    if pattern_type == "scheduled_task":
        return [
            (f"Collect from {source}", service_node_type(source), {"operation": "getAll"}),
            ("Build Report", "n8n-nodes-base.code", {"jsCode": "return items;"}),
            (f"Deliver via {target}", service_node_type(target), {"operation": "send"}),
        ]
    # webhook_handler
    return [
        ("Validate Payload", "n8n-nodes-base.if", {"conditions": {}}),
        (f"Process in {target}", service_node_type(target), {"operation": "create"}),
        ("Respond", "n8n-nodes-base.respondToWebhook", {"respondWith": "json"}),
    ]


def generate_template(
    pattern_type: str,
    source_service: Optional[str] = None,
    target_service: Optional[str] = None,
    trigger_type: Optional[str] = None,
    custom_requirements: Optional[str] = None,
) -> dict[str, Any]:
    """Build a template workflow for a known automation pattern.

    Raises:
        ValueError: If pattern_type or trigger_type is unknown
    """
    if pattern_type not in PATTERN_TYPES:
        raise ValueError(f"Unknown pattern_type '{pattern_type}'. Expected one of {', '.join(PATTERN_TYPES)}")
    trigger_key = trigger_type or DEFAULT_TRIGGERS[pattern_type]
    if trigger_key not in TRIGGER_NODES:
        raise ValueError(f"Unknown trigger_type '{trigger_key}'")

    source = source_service or "Source"
    target = target_service or "Target"
    logger.info(f"Generating {pattern_type} template: {source} -> {target} ({trigger_key})")

    steps = [TRIGGER_NODES[trigger_key], *_middle_steps(pattern_type, source, target)]
    nodes = [_node(i, name, node_type, dict(params)) for i, (name, node_type, params) in enumerate(steps)]

    workflow: dict[str, Any] = {
        "name": f"{source} to {target} {pattern_type.replace('_', ' ').title()}",
        "nodes": nodes,
        "connections": _chain([n["name"] for n in nodes]),
        "active": False,
        "settings": {"executionOrder": "v1"},
        "tags": ["automation", "ai-generated", pattern_type],
    }
    if custom_requirements:
        workflow["meta"] = {"requirements": custom_requirements}
    return {"success": True, "pattern_type": pattern_type, "workflow": workflow}
