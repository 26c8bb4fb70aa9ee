"""Session runtime for the GitFlow agent.

Hosts the compiled turn loop with a LangGraph ``MemorySaver`` checkpointer,
one thread per session, and exposes a simple ``run_turn()`` interface for
the worker and the CLI. Each turn sends only the user's new message; history,
workflow stage and repository metadata come from the session's checkpoint.
Every completed graph step is checkpointed, so a turn that fails part way
keeps the progress made before the failure. State does not survive a restart.

Environment variables:
- GITFLOW_MODEL: Model identifier (``provider/model``); auto-detected from API keys if unset
- GITFLOW_SYSTEM_PROMPT: Replaces the built-in system prompt template
- GITFLOW_MAX_MODEL_CALLS: Model calls allowed per turn (default: 25)
- GITFLOW_REQUIRE_TOOL_SUCCESS: Only successful tool calls advance the stage (default: "false")
- GITFLOW_GIT_TIMEOUT: Seconds before a git command is abandoned (default: 120)
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.messages import AIMessage, AnyMessage, HumanMessage
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph.state import CompiledStateGraph

from gitflow_agent.configuration import Configuration
from gitflow_agent.errors import GitflowError, get_error_registry
from gitflow_agent.graph import build_graph, recursion_limit_for
from gitflow_agent.workflow_state import (
    GitWorkflowState,
    initial_state,
    read_repository,
    read_stage,
)

logger = logging.getLogger("gitflow.runtime")

_checkpointer: MemorySaver | None = None
_agent: CompiledStateGraph | None = None


def get_agent() -> CompiledStateGraph:
    """Get or create the checkpointed turn loop shared by all sessions."""
    global _agent, _checkpointer
    if _agent is None:
        _checkpointer = MemorySaver()
        _agent = build_graph(checkpointer=_checkpointer)
    return _agent


def _thread_config(session_id: str) -> dict[str, Any]:
    return {"configurable": {"thread_id": session_id}}


def _stored_values(session_id: str) -> dict[str, Any]:
    return dict(get_agent().get_state(_thread_config(session_id)).values or {})


def get_session_state(session_id: str) -> GitWorkflowState | None:
    """Get the checkpointed state of a session, or None if it has not run yet."""
    values = _stored_values(session_id)
    if not values:
        return None
    return GitWorkflowState(
        messages=list(values.get("messages", [])),
        workflow_stage=read_stage(values),
        repository=read_repository(values),
        model_calls=values.get("model_calls", 0),
    )


def reset_session(session_id: str) -> bool:
    """Forget a session. Returns True if it existed."""
    existed = bool(_stored_values(session_id))
    if existed:
        _checkpointer.delete_thread(session_id)
    return existed


def list_sessions() -> list[str]:
    get_agent()
    return sorted({
        checkpoint.config["configurable"]["thread_id"]
        for checkpoint in _checkpointer.list(None)
    })


def _message_text(msg: AIMessage) -> str:
    if isinstance(msg.content, str):
        return msg.content
    # Content blocks
    parts = []
    for block in msg.content:
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
        elif isinstance(block, str):
            parts.append(block)
    return "\n".join(parts)


def _extract_response(new_messages: list[AnyMessage]) -> tuple[str, list[dict[str, Any]]]:
    """Extract the final reply text and the tool-call events of this turn.

    Args:
        new_messages: Messages appended during the turn.

    Returns:
        Tuple of (response_text, events)
    """
    events: list[dict[str, Any]] = []
    response_text = ""
    for msg in new_messages:
        if not isinstance(msg, AIMessage):
            continue
        response_text = _message_text(msg)
        for tc in msg.tool_calls:
            events.append({
                "tool_name": tc.get("name", "unknown"),
                "input": tc.get("args", {}),
                "status": "requested",
            })
    return response_text or "No response generated.", events


def _extract_usage_info(new_messages: list[AnyMessage]) -> dict[str, int]:
    """Sum token usage over the model calls of this turn."""
    usage = {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    for msg in new_messages:
        meta = getattr(msg, "usage_metadata", None)
        if meta:
            usage["input_tokens"] += meta.get("input_tokens", 0)
            usage["output_tokens"] += meta.get("output_tokens", 0)
    usage["total_tokens"] = usage["input_tokens"] + usage["output_tokens"]
    return usage


def run_turn(
    session_id: str,
    text: str,
    *,
    model: Any | None = None,
    configurable: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Run a single turn of conversation with the agent.

    Args:
        session_id: Unique identifier for the session/conversation.
        text: The user's input text.
        model: Optional model identifier or pre-built chat model for this turn.
        configurable: Extra ``Configuration`` fields for this turn.

    Returns:
        A dict containing:
            - session_id: The session ID
            - text: The agent's final response text
            - events: Tool calls requested during the turn
            - workflow_stage: Stage after the turn
            - repository: Repository metadata after the turn
            - usage: Token usage summed over the turn
            - error: Error payload (only when the turn failed)
    """
    agent = get_agent()

    settings = dict(configurable or {})
    if model is not None:
        settings["model"] = model
    configuration = Configuration.from_runnable_config({"configurable": settings})
    config = {
        "configurable": {**settings, "thread_id": session_id},
        "recursion_limit": recursion_limit_for(configuration.max_model_calls),
    }

    before = agent.get_state(config).values or {}
    previous_count = len(before.get("messages", []))
    inputs: dict[str, Any] = {"messages": [HumanMessage(content=text)], "model_calls": 0}
    if not before:
        inputs = {**initial_state(), **inputs}

    try:
        result = agent.invoke(inputs, config=config)
    except GitflowError as e:
        logger.error("Turn failed for session %s: [%s] %s", session_id, e.code, e)
        return _error_result(session_id, agent.get_state(config).values, e)
    except Exception as e:
        logger.exception("Unexpected error in session %s", session_id)
        error = get_error_registry().create_error("GF-INT-001", message=str(e))
        return _error_result(session_id, agent.get_state(config).values, error)

    new_messages = result["messages"][previous_count:]
    response_text, events = _extract_response(new_messages)
    return {
        "session_id": session_id,
        "text": response_text,
        "events": events,
        "workflow_stage": read_stage(result).value,
        "repository": read_repository(result).to_dict(),
        "usage": _extract_usage_info(new_messages),
    }


def _error_result(
    session_id: str,
    saved: dict[str, Any] | None,
    error: GitflowError,
) -> dict[str, Any]:
    # Steps completed before the failure stay in the session checkpoint
    saved = saved or {}
    return {
        "session_id": session_id,
        "text": f"Error: {error!s}",
        "events": [],
        "workflow_stage": read_stage(saved).value,
        "repository": read_repository(saved).to_dict(),
        "usage": None,
        "error": error.to_dict()["error"],
    }
