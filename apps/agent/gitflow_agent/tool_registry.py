"""Declarative tool registry for the GitFlow agent.

Usage:
    from gitflow_agent.tool_registry import get_workflow_tools

    tools = get_workflow_tools()
"""

from __future__ import annotations

import importlib
import logging

logger = logging.getLogger("gitflow.tools")

# Each entry: (friendly_name, module_path, callable_name)
TOOL_REGISTRY: list[tuple[str, str, str]] = [
    ("git", "gitflow_agent.git_tool", "get_git_tools"),
    ("files", "gitflow_agent.file_tools", "get_file_tools"),
]

# Names the model is bound against, in registry order
TOOL_NAMES: tuple[str, ...] = (
    "git_clone",
    "git_checkout",
    "git_status",
    "git_commit",
    "git_push",
    "read_file",
    "write_file",
    "list_directory",
)


def load_tools(registry: list[tuple[str, str, str]] | None = None) -> list:
    """Load tools from the registry.

    Args:
        registry: List of (name, module_path, func_name) tuples.
                  Defaults to ``TOOL_REGISTRY``.

    Returns:
        Flat list of loaded tool objects.
    """
    if registry is None:
        registry = TOOL_REGISTRY

    tools: list = []
    for name, module_path, func_name in registry:
        try:
            mod = importlib.import_module(module_path)
            getter = getattr(mod, func_name)
            result = getter() if callable(getter) and not hasattr(getter, "name") else getter
            if isinstance(result, list):
                tools.extend(result)
                logger.info("%s tools loaded (%d tool(s))", name, len(result))
            else:
                tools.append(result)
                logger.info("%s tool loaded", name)
        except (ImportError, AttributeError) as exc:
            logger.warning("%s tools not available: %s", name, exc)

    return tools


_workflow_tools: list | None = None


def get_workflow_tools() -> list:
    """Get the full workflow tool set (cached after the first load)."""
    global _workflow_tools
    if _workflow_tools is None:
        _workflow_tools = load_tools()
    return list(_workflow_tools)


def get_tools_by_name() -> dict:
    return {t.name: t for t in get_workflow_tools()}
