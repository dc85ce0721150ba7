"""FastAPI route modules."""

from . import generate, models, user

__all__ = ["generate", "models", "user"]
