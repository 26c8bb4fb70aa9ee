"""Workflow stage transitions and repository metadata folding.

Both functions are pure: they take the current value plus the tool calls of
the latest model turn and return the next value. Progression is inferred
from the tool calls the model *requested*; ``process_tool_results`` can
optionally restrict that to calls whose tool reported success.

Usage:
    from gitflow_agent.stage_controller import fold_repository, next_stage

    stage = next_stage(WorkflowStage.INITIALIZE, [{"name": "git_clone", "args": {...}}])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from langchain_core.messages import AIMessage, AnyMessage, ToolMessage
from langchain_core.runnables import RunnableConfig

from gitflow_agent.configuration import Configuration
from gitflow_agent.tool_result import artifact_succeeded
from gitflow_agent.tool_schemas import (
    GitCheckoutCall,
    GitCloneCall,
    WriteFileCall,
    parse_tool_call,
)
from gitflow_agent.workflow_state import (
    GitWorkflowState,
    RepositoryInfo,
    WorkflowStage,
    read_repository,
    read_stage,
)

logger = logging.getLogger("gitflow.stage")

# One forward edge per stage: (tool names that trigger it, next stage).
# PUSH has no outgoing edge.
STAGE_TRANSITIONS: dict[WorkflowStage, tuple[frozenset[str], WorkflowStage]] = {
    WorkflowStage.INITIALIZE: (frozenset({"git_clone"}), WorkflowStage.EXPLORE),
    WorkflowStage.EXPLORE: (frozenset({"write_file"}), WorkflowStage.MODIFY),
    WorkflowStage.MODIFY: (frozenset({"git_status", "read_file"}), WorkflowStage.VERIFY),
    WorkflowStage.VERIFY: (frozenset({"git_commit"}), WorkflowStage.COMMIT),
    WorkflowStage.COMMIT: (frozenset({"git_push"}), WorkflowStage.PUSH),
}

# Tools whose arguments feed repository metadata
REPOSITORY_TOOLS: frozenset[str] = frozenset({"git_clone", "git_checkout", "write_file"})


def _call_names(tool_calls: Iterable[Mapping[str, Any]]) -> set[str]:
    return {call.get("name") for call in tool_calls if call.get("name")}


def next_stage(
    stage: WorkflowStage,
    tool_calls: Sequence[Mapping[str, Any]],
) -> WorkflowStage:
    """Return the stage after a turn that requested ``tool_calls``.

    Advances at most one step, and only along the edge leaving ``stage``.
    """
    edge = STAGE_TRANSITIONS.get(stage)
    if edge is None or not tool_calls:
        return stage
    triggers, target = edge
    if _call_names(tool_calls) & triggers:
        return target
    return stage


def fold_repository(
    repository: RepositoryInfo,
    tool_calls: Sequence[Mapping[str, Any]],
) -> RepositoryInfo:
    """Fold the arguments of ``tool_calls`` into ``repository``.

    Calls are applied in order. A call whose arguments cannot be decoded or
    validated is skipped with a warning and leaves the metadata unchanged.
    """
    for call in tool_calls:
        name = call.get("name")
        if name not in REPOSITORY_TOOLS:
            continue
        try:
            request = parse_tool_call(name, call.get("args"))
        except ValueError as e:
            logger.warning("Skipping %s call with malformed arguments: %s", name, e)
            continue

        if isinstance(request, GitCloneCall):
            args = request.args
            repository = repository.with_clone(args.repoUrl, args.directory, args.branch)
        elif isinstance(request, GitCheckoutCall):
            repository = repository.with_branch(request.args.target)
        elif isinstance(request, WriteFileCall):
            repository = repository.with_modified_file(request.args.filePath)

    return repository


# =============================================================================
# Graph node
# =============================================================================


def _latest_ai_message(messages: Sequence[AnyMessage]) -> tuple[int, AIMessage | None]:
    for index in range(len(messages) - 1, -1, -1):
        if isinstance(messages[index], AIMessage):
            return index, messages[index]
    return -1, None


def _request_positions(message: AIMessage) -> dict[str, int]:
    """Position of each tool-call id in the provider's raw response.

    OpenAI-style responses keep the raw calls in ``additional_kwargs``;
    Anthropic-style responses keep ``tool_use`` blocks in the content.
    """
    ids: list[str] = []
    for raw in message.additional_kwargs.get("tool_calls") or []:
        if isinstance(raw, dict) and raw.get("id"):
            ids.append(raw["id"])
    if isinstance(message.content, list):
        for block in message.content:
            if isinstance(block, dict) and block.get("type") == "tool_use" and block.get("id"):
                ids.append(block["id"])
    positions: dict[str, int] = {}
    for call_id in ids:
        positions.setdefault(call_id, len(positions))
    return positions


def ordered_tool_calls(message: AIMessage) -> list[tuple[dict[str, Any], bool]]:
    """Every tool call of a model turn in request order, flagged valid or not.

    Parsed and unparsable calls live in separate lists on ``AIMessage``; they
    are merged back by their position in the raw response. Calls whose
    position is unknown keep their list order, valid ones first.
    """
    entries: list[tuple[dict[str, Any], bool]] = [(dict(tc), True) for tc in message.tool_calls]
    entries.extend((dict(tc), False) for tc in message.invalid_tool_calls)
    positions = _request_positions(message)
    if positions:
        unknown = len(positions)
        entries.sort(key=lambda entry: positions.get(entry[0].get("id") or "", unknown))
    return entries


def requested_tool_calls(message: AIMessage) -> list[dict[str, Any]]:
    """All tool calls of a model turn, including ones whose arguments did not parse."""
    return [
        {"name": call.get("name"), "args": call.get("args"), "id": call.get("id")}
        for call, _ in ordered_tool_calls(message)
    ]


def _successful_call_ids(messages: Sequence[AnyMessage]) -> set[str]:
    return {
        msg.tool_call_id
        for msg in messages
        if isinstance(msg, ToolMessage)
        and msg.status == "success"
        and artifact_succeeded(msg.artifact)
    }


def process_tool_results(state: GitWorkflowState, config: RunnableConfig) -> dict[str, Any]:
    """Update stage and repository metadata from the latest tool turn."""
    configuration = Configuration.from_runnable_config(config)
    messages = state["messages"]
    index, last_ai = _latest_ai_message(messages)
    if last_ai is None:
        return {}

    tool_calls = requested_tool_calls(last_ai)
    if not tool_calls:
        return {}

    if configuration.require_tool_success:
        succeeded = _successful_call_ids(messages[index + 1:])
        tool_calls = [call for call in tool_calls if call.get("id") in succeeded]

    stage = read_stage(state)
    repository = read_repository(state)
    update: dict[str, Any] = {}

    new_stage = next_stage(stage, tool_calls)
    if new_stage is not stage:
        logger.info("Workflow stage %s -> %s", stage.value, new_stage.value)
        update["workflow_stage"] = new_stage

    new_repository = fold_repository(repository, tool_calls)
    if new_repository != repository:
        logger.debug("Repository metadata updated: %s", new_repository.to_dict())
        update["repository"] = new_repository

    return update
