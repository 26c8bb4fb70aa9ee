"""Standardized error codes for the GitFlow agent.

Error code format: [SERVICE]-[CATEGORY]-[CODE]

Services:
- GF: GitFlow agent

Categories:
- API: Model provider errors (resolution and invocation)
- TOOL: Tool execution errors
- LOOP: Turn loop errors
- INT: Internal errors
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class ErrorDefinition:
    """Definition of a standardized error code."""

    code: str
    message: str
    http_status: int = 500
    retryable: bool = False


class GitflowError(Exception):
    """Standardized GitFlow error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int = 500,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.http_status = http_status
        self.retryable = retryable
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": str(self),
                "http_status": self.http_status,
                "retryable": self.retryable,
                "details": self.details,
            }
        }


# =============================================================================
# Agent Error Definitions
# =============================================================================

AGENT_ERRORS: dict[str, ErrorDefinition] = {
    # API/LLM errors
    "GF-API-001": ErrorDefinition("GF-API-001", "LLM API error", 502, retryable=True),
    "GF-API-005": ErrorDefinition("GF-API-005", "Model not available", 404),

    # Tool errors
    "GF-TOOL-001": ErrorDefinition("GF-TOOL-001", "Tool execution failed", 500),
    "GF-TOOL-002": ErrorDefinition("GF-TOOL-002", "Tool not found", 404),
    "GF-TOOL-005": ErrorDefinition("GF-TOOL-005", "Invalid tool arguments", 400),

    # Turn loop errors
    "GF-LOOP-001": ErrorDefinition("GF-LOOP-001", "Model call limit reached", 429),

    # Internal errors
    "GF-INT-001": ErrorDefinition("GF-INT-001", "Internal agent error", 500),
    "GF-INT-002": ErrorDefinition("GF-INT-002", "Configuration error", 500),
    "GF-INT-003": ErrorDefinition("GF-INT-003", "Session not found", 404),
}


class ErrorRegistry:
    """Registry for creating and managing standardized errors."""

    def __init__(self) -> None:
        self.errors = dict(AGENT_ERRORS)

    def create_error(
        self,
        code: str,
        details: dict[str, Any] | None = None,
        message: str | None = None,
    ) -> GitflowError:
        """Create a GitFlow error from a code.

        ``message`` replaces the registered message when the caller has a
        more specific description.
        """
        definition = self.errors.get(code)

        if definition is None:
            return GitflowError(
                code=code,
                message=message or "Unknown error",
                http_status=500,
                retryable=False,
                details=details,
            )

        return GitflowError(
            code=definition.code,
            message=message or definition.message,
            http_status=definition.http_status,
            retryable=definition.retryable,
            details=details,
        )

    def get_definition(self, code: str) -> ErrorDefinition | None:
        """Get error definition by code."""
        return self.errors.get(code)

    def get_all_definitions(self) -> dict[str, ErrorDefinition]:
        """Get all error definitions."""
        return dict(self.errors)

    def is_retryable(self, code: str) -> bool:
        """Check if an error is retryable."""
        definition = self.errors.get(code)
        return definition.retryable if definition else False


# Singleton instance
_registry: ErrorRegistry | None = None


def get_error_registry() -> ErrorRegistry:
    """Get the singleton error registry instance."""
    global _registry
    if _registry is None:
        _registry = ErrorRegistry()
    return _registry
