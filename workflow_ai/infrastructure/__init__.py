"""Infrastructure layer for external service integrations."""

from .keyvault import AKV
from .tool_servers import ToolServerProvider
from .tracing import configure_tracing

__all__ = [
    "AKV",
    "ToolServerProvider",
    "configure_tracing",
]
