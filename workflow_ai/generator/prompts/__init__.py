"""Prompt templates for the workflow generator."""

from .templates import (
    ANALYZE_TEMPLATE,
    BASE_TEMPLATE,
    CHAT_TEMPLATE,
    CREDENTIALS_TEMPLATE,
    EDIT_TEMPLATE,
    GENERATE_TEMPLATE,
    TOOL_SERVERS_TEMPLATE,
    USER_PREFIXES,
)

__all__ = [
    "ANALYZE_TEMPLATE",
    "BASE_TEMPLATE",
    "CHAT_TEMPLATE",
    "CREDENTIALS_TEMPLATE",
    "EDIT_TEMPLATE",
    "GENERATE_TEMPLATE",
    "TOOL_SERVERS_TEMPLATE",
    "USER_PREFIXES",
]
