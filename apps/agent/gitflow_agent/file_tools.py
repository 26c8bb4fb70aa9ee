"""File tools for exploring and editing a cloned repository.

Paths are plain filesystem paths, relative to the process working
directory unless absolute. Errors are reported as text, never raised.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from langchain_core.tools import tool

from gitflow_agent.tool_result import ToolResult
from gitflow_agent.tool_schemas import ListDirectoryArgs, ReadFileArgs, WriteFileArgs

logger = logging.getLogger("gitflow.tools.files")


def read_text_file(file_path: str) -> ToolResult:
    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", file_path, e)
        return ToolResult(tool="read_file", success=False, error=f"Error reading file: {e}")
    return ToolResult(tool="read_file", success=True, output=f"File contents:\n{content}")


def write_text_file(file_path: str, content: str) -> ToolResult:
    """Write ``content`` to ``file_path``, creating parent directories."""
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.warning("Could not write %s: %s", file_path, e)
        return ToolResult(tool="write_file", success=False, error=f"Error writing to file: {e}")
    logger.info("Wrote %d characters to %s", len(content), file_path)
    return ToolResult(
        tool="write_file",
        success=True,
        output=f"Content written to {file_path} successfully",
    )


def list_entries(directory: str) -> ToolResult:
    try:
        names = sorted(entry.name for entry in Path(directory).iterdir())
    except OSError as e:
        logger.warning("Could not list %s: %s", directory, e)
        return ToolResult(tool="list_directory", success=False, error=f"Error listing directory: {e}")
    listing = "\n".join(names)
    return ToolResult(
        tool="list_directory",
        success=True,
        output=f"Directory contents of {directory}:\n{listing}",
    )


@tool("read_file", args_schema=ReadFileArgs, response_format="content_and_artifact")
def read_file(filePath: str) -> tuple[str, dict[str, Any]]:
    """Read the contents of a file"""
    return read_text_file(filePath).as_tool_output()


@tool("write_file", args_schema=WriteFileArgs, response_format="content_and_artifact")
def write_file(filePath: str, content: str) -> tuple[str, dict[str, Any]]:
    """Write or update the contents of a file"""
    return write_text_file(filePath, content).as_tool_output()


@tool("list_directory", args_schema=ListDirectoryArgs, response_format="content_and_artifact")
def list_directory(directory: str) -> tuple[str, dict[str, Any]]:
    """List the contents of a directory"""
    return list_entries(directory).as_tool_output()


def get_file_tools() -> list:
    """Get the file LangChain tools for the agent."""
    return [read_file, write_file, list_directory]
