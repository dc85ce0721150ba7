"""Per-request decision of which augmenting tools to enable.

This is a keyword heuristic, not a classifier. A missed trigger only means the
model answers from what it already knows.
"""

from dataclasses import dataclass, field
from typing import Sequence

from ..schemas.generation import ToolServerDescriptor

# Phrases that signal the answer needs fresh information
SEARCH_TRIGGERS: tuple[str, ...] = (
    # API / documentation
    "api documentation",
    "api docs",
    "latest api",
    "current api",
    "integration guide",
    "webhook setup",
    "authentication method",
    # Versions / updates
    "latest version",
    "new features",
    "recent updates",
    "current version",
    "deprecated",
    "changelog",
    # Best practices
    "best practice",
    "recommended way",
    "optimal setup",
    "proper configuration",
    # Integration steps
    "how to connect",
    "integration steps",
    "setup guide",
    # Comparisons
    "alternatives",
    "comparison",
    "which is better",
    "options available",
)

# Only count when the user asked for a new workflow
GENERATE_TRIGGERS: tuple[str, ...] = (
    "latest",
    "current",
    "new integration",
    "api endpoint",
)

DEFAULT_WEB_SEARCH_USES = 3
TOOL_SERVER_WEB_SEARCH_USES = 5


@dataclass(frozen=True)
class ToolPlan:
    """Tools enabled for one generation turn."""

    use_web_search: bool
    max_web_search_uses: int
    tool_servers: tuple[ToolServerDescriptor, ...] = field(default_factory=tuple)


def needs_web_search(message: str, action: str) -> bool:
    lowered = message.lower()
    if any(trigger in lowered for trigger in SEARCH_TRIGGERS):
        return True
    return action == "generate" and any(trigger in lowered for trigger in GENERATE_TRIGGERS)


def decide(
    message: str,
    action: str,
    tool_servers: Sequence[ToolServerDescriptor] = (),
    default_uses: int = DEFAULT_WEB_SEARCH_USES,
    tool_server_uses: int = TOOL_SERVER_WEB_SEARCH_USES,
) -> ToolPlan:
    """Decide web search and tool-server attachment for a request.

    Args:
        message: The user's message
        action: generate, analyze, edit or chat
        tool_servers: Candidate external servers; only enabled ones are attached
        default_uses: Web search budget without tool servers
        tool_server_uses: Web search budget when tool servers are attached

    Returns:
        ToolPlan for the gateway
    """
    attached = tuple(server for server in tool_servers if server.tools_enabled)
    return ToolPlan(
        use_web_search=needs_web_search(message, action),
        max_web_search_uses=tool_server_uses if attached else default_uses,
        tool_servers=attached,
    )
