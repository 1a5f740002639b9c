"""Exception hierarchy for simple-agent.

All package exceptions inherit from AgentError.
"""
from __future__ import annotations


class AgentError(Exception):
    """Base exception for all simple-agent errors."""


class ConfigError(AgentError):
    """Raised when required configuration is missing or invalid."""


class InputError(AgentError):
    """Raised when the interactive input subsystem cannot be initialised."""


class InferenceError(AgentError):
    """Raised when a chat completion request fails."""


class APIStatusError(InferenceError):
    """Raised when the endpoint answers with a non-200 status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API returned status {status_code}: {body}")


class ProviderError(InferenceError):
    """Raised when the response body carries a provider error object."""

    def __init__(self, message: str, type: str = "", code: str = "") -> None:
        self.message = message
        self.type = type
        self.code = code
        super().__init__(f"API error: {message} (type: {type}, code: {code})")


class EmptyReplyError(InferenceError):
    """Raised when the response has no choices."""

    def __init__(self) -> None:
        super().__init__("empty reply")


class ToolError(AgentError):
    """Raised by a tool executor for a refused or failed operation."""
