"""Workflow extraction from accumulated assistant text.

The model is asked to answer with a fenced ```json block. There may be prose
around it and more than one block (an example followed by the real answer),
so every block is tried in document order and the first valid one wins.
"""

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from ..schemas.workflow import WorkflowDocument

logger = logging.getLogger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")

DEFAULT_WORKFLOW_NAME = "AI Generated Automation"
DEFAULT_SETTINGS: dict[str, Any] = {
    "saveExecutionProgress": True,
    "saveManualExecutions": True,
    "executionOrder": "v1",
}
DEFAULT_TAGS: list[str] = ["automation", "ai-generated"]

# Left-to-right layout for nodes that arrive without a position
POSITION_ORIGIN = (300, 300)
POSITION_STEP = 200


def find_candidates(text: str) -> list[str]:
    """Return the bodies of all ```json fenced blocks in document order."""
    return [match.group(1).strip() for match in JSON_BLOCK_PATTERN.finditer(text)]


def is_valid_workflow(candidate: Any) -> bool:
    """Minimal structural check: a non-empty node list with id, name and type."""
    if not isinstance(candidate, dict):
        return False
    nodes = candidate.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        return False
    for node in nodes:
        if not isinstance(node, dict):
            return False
        for key in ("id", "name", "type"):
            value = node.get(key)
            if not isinstance(value, str) or not value.strip():
                return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_position(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_number(v) for v in value)


def _normalize_node(node: dict[str, Any], index: int) -> dict[str, Any]:
    """Fill missing node fields and replace malformed ones with their defaults."""
    normalized = dict(node)
    if not isinstance(normalized.get("parameters"), dict):
        normalized["parameters"] = {}
    if not _is_position(normalized.get("position")):
        normalized["position"] = [POSITION_ORIGIN[0] + index * POSITION_STEP, POSITION_ORIGIN[1]]
    if not _is_number(normalized.get("typeVersion")) or not normalized["typeVersion"]:
        normalized["typeVersion"] = 1
    if not isinstance(normalized.get("continueOnFail"), bool):
        normalized["continueOnFail"] = False
    if not isinstance(normalized.get("retryOnFail"), bool):
        normalized["retryOnFail"] = True
    if not isinstance(normalized.get("maxTries"), int) or isinstance(normalized["maxTries"], bool):
        normalized["maxTries"] = 3
    return normalized


def normalize_workflow(workflow: dict[str, Any]) -> dict[str, Any]:
    """Fill defaults for every missing optional field.

    A field of the wrong shape is treated as missing, so any candidate that
    passed is_valid_workflow normalizes into a valid WorkflowDocument.
    Applying this twice gives the same result as applying it once.

    Args:
        workflow: A candidate that passed is_valid_workflow

    Returns:
        A new dict; the input is not modified
    """
    name = workflow.get("name")
    connections = workflow.get("connections")
    settings = workflow.get("settings")
    static_data = workflow.get("staticData")
    tags = workflow.get("tags")
    return {
        "name": name if isinstance(name, str) and name.strip() else DEFAULT_WORKFLOW_NAME,
        "nodes": [_normalize_node(node, i) for i, node in enumerate(workflow["nodes"])],
        "connections": connections if isinstance(connections, dict) else {},
        "active": workflow.get("active") is True,
        "settings": {**DEFAULT_SETTINGS, **(settings if isinstance(settings, dict) else {})},
        "staticData": static_data if isinstance(static_data, dict) else {},
        "tags": list(tags) if isinstance(tags, list) else list(DEFAULT_TAGS),
    }


def extract(full_text: str) -> Optional[WorkflowDocument]:
    """Extract the first valid workflow document from model output.

    Never raises. Returning None is a normal outcome: the model answered
    with prose only, or none of its blocks was a usable workflow.

    Args:
        full_text: The complete assistant text of one generation

    Returns:
        The normalized WorkflowDocument, or None
    """
    candidates = find_candidates(full_text)
    logger.info(f"Extracting workflow from {len(full_text)} chars, {len(candidates)} JSON blocks")

    for index, raw in enumerate(candidates):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug(f"JSON block {index} is not valid JSON: {e}")
            continue

        if not is_valid_workflow(parsed):
            logger.debug(f"JSON block {index} is not a workflow")
            continue

        try:
            document = WorkflowDocument.model_validate(normalize_workflow(parsed))
        except ValidationError as e:
            logger.debug(f"JSON block {index} failed schema validation: {e}")
            continue

        dangling = dangling_connections(document)
        if dangling:
            logger.warning(f"Workflow '{document.name}' has connections to unknown nodes: {dangling}")
        logger.info(f"Found valid workflow with {len(document.nodes)} nodes")
        return document

    logger.info("No valid workflow found in content")
    return None


def dangling_connections(document: WorkflowDocument) -> list[str]:
    """List node names referenced by connections that are not in the document.

    Extraction does not reject or repair these; callers decide what to do.
    """
    known = set(document.node_names)
    missing: list[str] = []

    def note(name: Any) -> None:
        if isinstance(name, str) and name not in known and name not in missing:
            missing.append(name)

    for source, outputs in document.connections.items():
        note(source)
        if not isinstance(outputs, dict):
            continue
        for branches in outputs.values():
            for branch in branches if isinstance(branches, list) else []:
                for link in branch if isinstance(branch, list) else []:
                    if isinstance(link, dict):
                        note(link.get("node"))
    return missing
