"""Structured result shared by every workflow tool.

Tools hand the model a plain string (``to_content()``) and keep the
structured form as the LangChain tool artifact (``to_artifact()``) so the
stage controller can tell success from failure without parsing text.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ToolResult:
    """Result from a single tool invocation.

    Attributes:
        tool: Name of the tool that produced the result.
        success: Whether the underlying command or file operation succeeded.
        output: Text shown to the model on success.
        error: Text shown to the model on failure.
        duration_ms: Time taken in milliseconds, when measured.
    """

    tool: str
    success: bool
    output: str = ""
    error: str | None = None
    duration_ms: float | None = None

    def to_content(self) -> str:
        """Format result for LLM consumption."""
        if not self.success:
            return self.error or f"Error: {self.tool} failed"
        return self.output or f"{self.tool} completed successfully"

    def to_artifact(self) -> dict[str, Any]:
        return asdict(self)

    def as_tool_output(self) -> tuple[str, dict[str, Any]]:
        """Return the ``(content, artifact)`` pair expected by
        ``response_format="content_and_artifact"`` tools."""
        return self.to_content(), self.to_artifact()


def artifact_succeeded(artifact: Any) -> bool:
    """Check the ``success`` flag of a tool artifact, whatever its shape."""
    if isinstance(artifact, ToolResult):
        return artifact.success
    if isinstance(artifact, dict):
        return bool(artifact.get("success", False))
    return False
