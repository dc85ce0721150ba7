"""Prompt construction for each generation action.

All functions here are pure: the same inputs always give the same strings.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from ..schemas.generation import ToolServerDescriptor
from .prompts import (
    ANALYZE_TEMPLATE,
    BASE_TEMPLATE,
    CHAT_TEMPLATE,
    CREDENTIALS_TEMPLATE,
    EDIT_TEMPLATE,
    GENERATE_TEMPLATE,
    TOOL_SERVERS_TEMPLATE,
    USER_PREFIXES,
)


@dataclass(frozen=True)
class PromptPair:
    """System prompt plus the prefix placed before the user's message."""

    system: str
    user_prefix: str

    def user_prompt(self, message: str) -> str:
        return f"{self.user_prefix}{message}"


def serialize_workflow(document: Any) -> str:
    """Serialize a workflow the way it is embedded in prompts."""
    if hasattr(document, "to_dict"):
        document = document.to_dict()
    return json.dumps(document, indent=2)


def _task_section(action: str, existing_document: Optional[Any]) -> str:
    if action == "generate":
        return GENERATE_TEMPLATE
    if action == "analyze":
        return ANALYZE_TEMPLATE.format(workflow_json=serialize_workflow(existing_document or {}))
    if action == "edit":
        return EDIT_TEMPLATE.format(workflow_json=serialize_workflow(existing_document or {}))
    return CHAT_TEMPLATE


def credentials_clause(credential_hints: Iterable[str]) -> str:
    lines = "\n".join(f"- {name}: ready to use" for name in credential_hints)
    return CREDENTIALS_TEMPLATE.format(credential_lines=lines)


def tool_servers_clause(tool_servers: Sequence[ToolServerDescriptor]) -> str:
    lines = []
    for server in tool_servers:
        if server.enabled_tools:
            lines.append(f"- {server.display_name}: {', '.join(server.enabled_tools)}")
        else:
            lines.append(f"- {server.display_name}: all tools")
    return TOOL_SERVERS_TEMPLATE.format(server_lines="\n".join(lines))


def build(
    action: str,
    existing_document: Optional[Any] = None,
    credential_hints: Optional[Iterable[str]] = None,
    tool_servers: Optional[Sequence[ToolServerDescriptor]] = None,
) -> PromptPair:
    """Build the system prompt and user prefix for one request.

    Args:
        action: generate, analyze, edit or chat; anything else is treated as chat
        existing_document: Workflow embedded for analyze and edit
        credential_hints: Credential names (never values) the workflow may use
        tool_servers: Attached external tool servers; disabled ones are skipped

    Returns:
        PromptPair with the system prompt and the user prompt prefix
    """
    parts = [BASE_TEMPLATE.format()]

    hints = list(credential_hints or [])
    if hints:
        parts.append(credentials_clause(hints))

    enabled_servers = [s for s in (tool_servers or []) if s.tools_enabled]
    if enabled_servers:
        parts.append(tool_servers_clause(enabled_servers))

    parts.append(_task_section(action, existing_document))

    return PromptPair(system="\n".join(parts), user_prefix=USER_PREFIXES.get(action, ""))
