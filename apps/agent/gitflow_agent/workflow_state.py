"""Workflow state carried across turns of the GitFlow agent.

The state is a plain value threaded through the LangGraph turn loop:
every node receives the current ``GitWorkflowState`` and returns an update,
and the repository metadata is an immutable ``RepositoryInfo`` that is
replaced rather than mutated.

Usage:
    from gitflow_agent.workflow_state import WorkflowStage, initial_state

    state = initial_state()
    assert state["workflow_stage"] is WorkflowStage.INITIALIZE
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Annotated, Any, TypedDict

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages


class WorkflowStage(str, Enum):
    """Linear phases of a git task, in their fixed order."""

    INITIALIZE = "initialize"
    EXPLORE = "explore"
    MODIFY = "modify"
    VERIFY = "verify"
    COMMIT = "commit"
    PUSH = "push"

    @property
    def rank(self) -> int:
        """Position of the stage in the total order (0-based)."""
        return STAGE_ORDER.index(self)


STAGE_ORDER: tuple[WorkflowStage, ...] = tuple(WorkflowStage)

DEFAULT_REPO_NAME = "repo"


def derive_directory(repo_url: str) -> str:
    """Derive the local clone directory for a repository URL.

    Takes the last path segment (``/`` or ``:`` separated), drops a trailing
    ``.git`` and prefixes ``./``. Both the clone tool and the stage
    controller go through this function so they always agree.

    >>> derive_directory("https://host/org/myrepo.git")
    './myrepo'
    """
    segments = [s for s in re.split(r"[/:]", repo_url.strip()) if s]
    name = segments[-1] if segments else ""
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return f"./{name or DEFAULT_REPO_NAME}"


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata accumulated from tool-call requests.

    Attributes:
        url: Remote URL passed to ``git_clone``.
        directory: Local working directory (explicit or derived from ``url``).
        branch: Last branch requested by ``git_clone`` or ``git_checkout``.
        files_modified: Paths passed to ``write_file``, without duplicates,
            in first-write order.
    """

    url: str | None = None
    directory: str | None = None
    branch: str | None = None
    files_modified: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Checkpoint round-trips hand sequences back as lists
        if not isinstance(self.files_modified, tuple):
            object.__setattr__(self, "files_modified", tuple(self.files_modified))

    def with_clone(
        self,
        url: str,
        directory: str | None = None,
        branch: str | None = None,
    ) -> RepositoryInfo:
        return replace(
            self,
            url=url,
            directory=directory or derive_directory(url),
            branch=branch or self.branch,
        )

    def with_branch(self, branch: str) -> RepositoryInfo:
        return replace(self, branch=branch)

    def with_modified_file(self, file_path: str) -> RepositoryInfo:
        if file_path in self.files_modified:
            return self
        return replace(self, files_modified=self.files_modified + (file_path,))

    def is_empty(self) -> bool:
        return self == RepositoryInfo()

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase shape exposed by the worker API."""
        return {
            "url": self.url,
            "directory": self.directory,
            "branch": self.branch,
            "filesModified": list(self.files_modified),
        }


class GitWorkflowState(TypedDict):
    """LangGraph state for the git workflow agent."""

    messages: Annotated[list[AnyMessage], add_messages]
    workflow_stage: WorkflowStage
    repository: RepositoryInfo
    # Model invocations in the current run; reset at the start of each turn
    model_calls: int


def initial_state() -> GitWorkflowState:
    """Create the state for a new conversation."""
    return GitWorkflowState(
        messages=[],
        workflow_stage=WorkflowStage.INITIALIZE,
        repository=RepositoryInfo(),
        model_calls=0,
    )


def read_stage(state: Mapping[str, Any]) -> WorkflowStage:
    """Workflow stage of ``state``, INITIALIZE when not set yet.

    Accepts the plain string a checkpointer may hand back for the enum.
    """
    value = state.get("workflow_stage")
    return WorkflowStage(value) if value else WorkflowStage.INITIALIZE


def read_repository(state: Mapping[str, Any]) -> RepositoryInfo:
    """Repository metadata of ``state``, empty when not set yet."""
    value = state.get("repository")
    if isinstance(value, RepositoryInfo):
        return value
    if isinstance(value, Mapping):
        return RepositoryInfo(
            url=value.get("url"),
            directory=value.get("directory"),
            branch=value.get("branch"),
            files_modified=tuple(value.get("files_modified", value.get("filesModified", ()))),
        )
    return RepositoryInfo()
