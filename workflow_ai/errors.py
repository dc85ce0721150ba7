"""Error hierarchy for the generation pipeline.

Only configuration and gateway failures are exceptions that leave the core.
A generation that yields no workflow document is a normal outcome and has
no error type.
"""

from enum import Enum
from typing import Optional


class WorkflowAIError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(WorkflowAIError):
    """Raised at startup when required configuration (the provider key) is missing."""


class GatewayErrorKind(str, Enum):
    """Failure classes of the outbound provider call."""

    UNAUTHORIZED = "unauthorized"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    INVALID_REQUEST = "invalid_request"


class GatewayError(WorkflowAIError):
    """Raised when the provider stream cannot be opened."""

    def __init__(
        self,
        kind: GatewayErrorKind,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, cause)
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind.value} ({self.status_code}): {self.message}"
        return f"{self.kind.value}: {self.message}"


class StreamReadError(WorkflowAIError):
    """Raised by a stream handle when the transport fails mid-stream."""
