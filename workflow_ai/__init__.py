"""WorkFlow AI: natural-language to n8n workflow generation service."""

__version__ = "1.0.0"
