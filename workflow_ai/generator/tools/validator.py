"""workflow_validator: static checks over a workflow document."""

import json
import logging
from typing import Any, Iterator

logger = logging.getLogger(__name__)

VALIDATION_TYPES = ("syntax", "logic", "performance", "security", "all")
CATEGORIES = ("syntax", "logic", "performance", "security")

SENSITIVE_MARKERS = ("password", "token", "secret", "apikey", "api_key")
LARGE_WORKFLOW_NODES = 20


def _issue(level: str, message: str, fix: str) -> dict[str, str]:
    return {"level": level, "message": message, "fix": fix}


def _links(connections: Any) -> Iterator[tuple[str, str]]:
    """Yield (source, target) pairs from an n8n connections mapping."""
    if not isinstance(connections, dict):
        return
    for source, outputs in connections.items():
        if not isinstance(outputs, dict):
            continue
        for branches in outputs.values():
            for branch in branches if isinstance(branches, list) else []:
                for link in branch if isinstance(branch, list) else []:
                    if isinstance(link, dict) and isinstance(link.get("node"), str):
                        yield source, link["node"]


def _is_trigger(node: dict[str, Any]) -> bool:
    node_type = str(node.get("type", "")).lower()
    return "trigger" in node_type or node_type.endswith(".webhook")


def check_syntax(workflow: dict[str, Any]) -> list[dict[str, str]]:
    issues = []
    if not isinstance(workflow.get("name"), str) or not workflow["name"]:
        issues.append(_issue("error", "Workflow must have a valid name", "Add a descriptive name to your workflow"))

    nodes = workflow.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        issues.append(_issue("error", "Workflow must have a nodes array", "Add at least one node to your workflow"))
        nodes = []

    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            issues.append(_issue("error", f"Node {index} is not an object", "Each node must be a JSON object"))
            continue
        label = node.get("name") or index
        if not node.get("id"):
            issues.append(_issue("error", f"Node {label} missing required id", "Add a unique ID to each node"))
        if not node.get("name"):
            issues.append(_issue("error", f"Node {index} missing required name", "Give each node a unique name"))
        if not node.get("type"):
            issues.append(_issue(
                "error", f"Node {label} missing required type",
                "Specify the node type (e.g., n8n-nodes-base.httpRequest)",
            ))
        position = node.get("position")
        if not isinstance(position, list) or len(position) != 2:
            issues.append(_issue(
                "warning", f"Node {label} missing position",
                "Add position coordinates [x, y] for proper canvas layout",
            ))

    if not isinstance(workflow.get("connections"), dict):
        issues.append(_issue("warning", "Workflow missing connections object", "Define connections between nodes"))
    return issues


def check_logic(workflow: dict[str, Any]) -> list[dict[str, str]]:
    issues = []
    nodes = [n for n in workflow.get("nodes") or [] if isinstance(n, dict)]
    triggers = [n for n in nodes if _is_trigger(n)]
    if not triggers:
        issues.append(_issue("error", "Workflow has no trigger nodes", "Add at least one trigger node to start the workflow"))
    elif len(triggers) > 1:
        issues.append(_issue("warning", "Multiple trigger nodes detected", "Consider if multiple triggers are necessary"))

    names = {n.get("name") for n in nodes}
    links = list(_links(workflow.get("connections")))
    targets = {target for _, target in links}

    for source, target in links:
        for name in (source, target):
            if name not in names:
                issues.append(_issue(
                    "error", f"Connection references unknown node \"{name}\"",
                    "Connect nodes by their exact name",
                ))

    for node in nodes:
        if not _is_trigger(node) and node.get("name") not in targets:
            issues.append(_issue(
                "warning", f"Node \"{node.get('name')}\" appears to be orphaned",
                "Connect this node to the workflow or remove it",
            ))
    return issues


def _has_cycle(links: list[tuple[str, str]]) -> bool:
    graph: dict[str, list[str]] = {}
    for source, target in links:
        graph.setdefault(source, []).append(target)

    visiting: set[str] = set()
    done: set[str] = set()

    def visit(name: str) -> bool:
        if name in visiting:
            return True
        if name in done:
            return False
        visiting.add(name)
        if any(visit(nxt) for nxt in graph.get(name, [])):
            return True
        visiting.discard(name)
        done.add(name)
        return False

    return any(visit(name) for name in list(graph))


def check_performance(workflow: dict[str, Any]) -> list[dict[str, str]]:
    issues = []
    if len(workflow.get("nodes") or []) > LARGE_WORKFLOW_NODES:
        issues.append(_issue(
            "warning", "Large workflow with many nodes",
            "Consider breaking into smaller workflows or optimizing node usage",
        ))
    if _has_cycle(list(_links(workflow.get("connections")))):
        issues.append(_issue(
            "error", "Circular dependency detected in workflow",
            "Remove circular connections to prevent infinite loops",
        ))
    return issues


def check_security(workflow: dict[str, Any]) -> list[dict[str, str]]:
    issues = []
    for node in workflow.get("nodes") or []:
        if not isinstance(node, dict):
            continue
        parameters = json.dumps(node.get("parameters") or {}).lower()
        if any(marker in parameters for marker in SENSITIVE_MARKERS) and "$credentials" not in parameters:
            issues.append(_issue(
                "warning", f"Node \"{node.get('name')}\" may contain hardcoded credentials",
                "Use credential system instead of hardcoding sensitive data",
            ))
        if node.get("type") == "n8n-nodes-base.httpRequest" and not node.get("credentials"):
            issues.append(_issue(
                "info", f"HTTP node \"{node.get('name')}\" has no authentication",
                "Consider adding authentication if accessing protected resources",
            ))
    return issues


CHECKS = {
    "syntax": check_syntax,
    "logic": check_logic,
    "performance": check_performance,
    "security": check_security,
}


def validate_workflow(workflow: dict[str, Any], validation_type: str = "syntax") -> dict[str, Any]:
    """Run the requested checks and score the workflow.

    The score starts at 100 and loses 20 per error and 5 per warning.

    Raises:
        ValueError: If workflow is not an object or validation_type is unknown
    """
    if not isinstance(workflow, dict):
        raise ValueError("workflow must be a JSON object")
    if validation_type not in VALIDATION_TYPES:
        raise ValueError(f"Unknown validation_type '{validation_type}'")

    logger.info(f"Validating workflow ({validation_type})")
    selected = CATEGORIES if validation_type == "all" else (validation_type,)
    results: dict[str, Any] = {
        category: CHECKS[category](workflow) if category in selected else []
        for category in CATEGORIES
    }

    issues = [issue for category in CATEGORIES for issue in results[category]]
    errors = sum(1 for issue in issues if issue["level"] == "error")
    warnings = sum(1 for issue in issues if issue["level"] == "warning")
    score = max(0, 100 - errors * 20 - warnings * 5)
    results["overall_score"] = score

    return {
        "success": True,
        "validation_type": validation_type,
        "results": results,
        "summary": {"total_issues": len(issues), "errors": errors, "warnings": warnings, "score": score},
    }
