"""
Shared error handling for the remote config engine.

Only caller contract violations are raised. Data-quality problems found
while evaluating a template are logged and reported as diagnostics instead.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RemoteConfigException(Exception):
    """Base exception for the remote config engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidArgumentError(RemoteConfigException):
    """Raised when a caller passes arguments that break an API contract."""

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class TemplateParseError(InvalidArgumentError):
    """Raised when a template string cannot be decoded."""

    def __init__(self, message: str = "Unable to parse JSON string.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
