"""Git operations tool with structured output.

This module provides the git side of the workflow tool set:
- ``GitTool`` runs git commands as argument lists (never through a shell)
  with timeout protection and returns a structured ``GitResult``
- ``clone_repository`` and friends turn those results into ``ToolResult``
  values with model-facing text
- LangChain ``@tool`` wrappers expose them to the model

Every wrapper returns text in both the success and the failure case; git
failures, timeouts and a missing git binary never raise past the tool.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from langchain_core.tools import tool

from gitflow_agent import agent_config
from gitflow_agent.tool_result import ToolResult
from gitflow_agent.tool_schemas import (
    GitCheckoutArgs,
    GitCloneArgs,
    GitCommitArgs,
    GitPushArgs,
    GitStatusArgs,
)
from gitflow_agent.workflow_state import derive_directory

logger = logging.getLogger("gitflow.tools.git")


@dataclass(frozen=True)
class GitResult:
    """Result from a git command.

    Attributes:
        operation: The git operation that was performed.
        success: Whether the command exited with status 0.
        output: The stdout from the git command.
        error: The stderr from the git command, if any.
        duration_ms: Time taken to execute the command in milliseconds.
    """
    operation: str
    success: bool
    output: str
    error: str | None = None
    duration_ms: float | None = None

    @property
    def message(self) -> str:
        """Most informative text of the result.

        git writes progress and some errors to stderr and some failures
        (``nothing to commit``) to stdout, so fall back between them.
        """
        if self.success:
            return (self.output or self.error or "").strip()
        return (self.error or self.output or "").strip() or f"git {self.operation} failed"


def validate_commit_message(message: str) -> tuple[bool, str | None]:
    """Validate commit message format.

    Returns:
        Tuple of (valid, error). If valid is False, error describes the issue.
    """
    if not message or not message.strip():
        return False, "Commit message cannot be empty"
    return True, None


class GitTool:
    """Git commands scoped to one working directory.

    Usage:
        git = GitTool("./myrepo")
        result = git.status()
        if result.success:
            print(result.output)
    """

    def __init__(
        self,
        repo_path: str | Path,
        timeout: float | None = None,
    ) -> None:
        """Initialize the GitTool.

        Args:
            repo_path: Path to the git working directory.
            timeout: Maximum time in seconds for each git command.

        Raises:
            ValueError: If repo_path is not an existing directory.
        """
        self.repo_path = Path(repo_path)
        self.timeout = timeout if timeout is not None else agent_config.GIT_TIMEOUT
        if not self.repo_path.is_dir():
            raise ValueError(f"Directory not found: {repo_path}")

    @staticmethod
    def _execute(
        operation: str,
        args: list[str],
        cwd: Path | None,
        timeout: float,
    ) -> GitResult:
        """Execute a git command and return structured result."""
        logger.info("Executing: git %s in %s", " ".join(args), cwd or "current directory")
        start_time = time.perf_counter()
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("git %s timed out after %s seconds", operation, timeout)
            return GitResult(
                operation=operation,
                success=False,
                output="",
                error=f"Operation timed out after {timeout} seconds",
                duration_ms=duration_ms,
            )
        except OSError as e:
            # git binary missing or cwd unusable
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error("git %s could not be started: %s", operation, e)
            return GitResult(
                operation=operation,
                success=False,
                output="",
                error=str(e),
                duration_ms=duration_ms,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        success = result.returncode == 0
        if success and result.stderr:
            logger.debug("git %s stderr: %s", operation, result.stderr.strip())
        elif not success:
            logger.warning("git %s exited with %d", operation, result.returncode)
        return GitResult(
            operation=operation,
            success=success,
            output=result.stdout,
            error=result.stderr if result.stderr else None,
            duration_ms=duration_ms,
        )

    def _run(self, operation: str, args: list[str]) -> GitResult:
        return self._execute(operation, args, self.repo_path, self.timeout)

    @classmethod
    def clone(
        cls,
        repo_url: str,
        directory: str | Path,
        timeout: float | None = None,
    ) -> GitResult:
        """Clone ``repo_url`` into ``directory`` (relative to the process CWD)."""
        return cls._execute(
            "clone",
            ["clone", repo_url, str(directory)],
            None,
            timeout if timeout is not None else agent_config.GIT_TIMEOUT,
        )

    def status(self) -> GitResult:
        return self._run("status", ["status"])

    def add_all(self) -> GitResult:
        """Stage every change in the working tree."""
        return self._run("add", ["add", "."])

    def commit(self, message: str) -> GitResult:
        valid, error = validate_commit_message(message)
        if not valid:
            return GitResult(operation="commit", success=False, output="", error=error)
        return self._run("commit", ["commit", "-m", message])

    def checkout(self, target: str, *, create_branch: bool = False) -> GitResult:
        args = ["checkout", "-b", target] if create_branch else ["checkout", target]
        return self._run("checkout", args)

    def current_branch(self) -> GitResult:
        return self._run("rev-parse", ["rev-parse", "--abbrev-ref", "HEAD"])

    def push(
        self,
        remote: str,
        branch: str,
        *,
        set_upstream: bool = False,
    ) -> GitResult:
        args = ["push", "-u", remote, branch] if set_upstream else ["push", remote, branch]
        return self._run("push", args)


# =============================================================================
# Tool operations
# =============================================================================


def _failure(tool_name: str, prefix: str, detail: str, duration_ms: float | None = None) -> ToolResult:
    return ToolResult(
        tool=tool_name,
        success=False,
        error=f"{prefix}: {detail}",
        duration_ms=duration_ms,
    )


def clone_repository(
    repo_url: str,
    directory: str | None = None,
    branch: str | None = None,
) -> ToolResult:
    """Clone a repository, optionally checking out ``branch`` afterwards."""
    prefix = "Error cloning repository"
    target = directory or derive_directory(repo_url)
    try:
        Path(target).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return _failure("git_clone", prefix, str(e))

    result = GitTool.clone(repo_url, target)
    if not result.success:
        return _failure("git_clone", prefix, result.message, result.duration_ms)

    if branch:
        checkout = GitTool(target).checkout(branch)
        if not checkout.success:
            return _failure("git_clone", prefix, checkout.message, checkout.duration_ms)

    return ToolResult(
        tool="git_clone",
        success=True,
        output=f"Repository cloned successfully to {target}",
        duration_ms=result.duration_ms,
    )


def checkout_target(directory: str, target: str, create_branch: bool = False) -> ToolResult:
    prefix = f"Error checking out {target}"
    try:
        result = GitTool(directory).checkout(target, create_branch=create_branch)
    except ValueError as e:
        return _failure("git_checkout", prefix, str(e))
    if not result.success:
        return _failure("git_checkout", prefix, result.message, result.duration_ms)
    return ToolResult(
        tool="git_checkout",
        success=True,
        output=f"Successfully checked out {target}: {result.message}",
        duration_ms=result.duration_ms,
    )


def repository_status(directory: str) -> ToolResult:
    prefix = "Error getting git status"
    try:
        result = GitTool(directory).status()
    except ValueError as e:
        return _failure("git_status", prefix, str(e))
    if not result.success:
        return _failure("git_status", prefix, result.message, result.duration_ms)
    return ToolResult(
        tool="git_status",
        success=True,
        output=f"Git status: {result.output.strip()}",
        duration_ms=result.duration_ms,
    )


def commit_changes(directory: str, message: str, add_all: bool = True) -> ToolResult:
    prefix = "Error committing changes"
    try:
        git = GitTool(directory)
    except ValueError as e:
        return _failure("git_commit", prefix, str(e))

    if add_all:
        staged = git.add_all()
        if not staged.success:
            return _failure("git_commit", prefix, staged.message, staged.duration_ms)

    result = git.commit(message)
    if not result.success:
        return _failure("git_commit", prefix, result.message, result.duration_ms)
    return ToolResult(
        tool="git_commit",
        success=True,
        output=f"Changes committed: {result.output.strip()}",
        duration_ms=result.duration_ms,
    )


def push_changes(
    directory: str,
    remote: str = "origin",
    branch: str | None = None,
    set_upstream: bool = False,
) -> ToolResult:
    prefix = "Error pushing changes"
    try:
        git = GitTool(directory)
    except ValueError as e:
        return _failure("git_push", prefix, str(e))

    if not branch:
        current = git.current_branch()
        if not current.success:
            return _failure("git_push", prefix, current.message, current.duration_ms)
        branch = current.output.strip()

    result = git.push(remote, branch, set_upstream=set_upstream)
    if not result.success:
        return _failure("git_push", prefix, result.message, result.duration_ms)
    return ToolResult(
        tool="git_push",
        success=True,
        output=f"Changes pushed to {remote}/{branch}: {result.message}",
        duration_ms=result.duration_ms,
    )


# =============================================================================
# LangChain @tool wrappers
# =============================================================================
# Parameter names mirror the camelCase argument schema the model is bound to.


@tool("git_clone", args_schema=GitCloneArgs, response_format="content_and_artifact")
def git_clone(
    repoUrl: str,
    directory: str | None = None,
    branch: str | None = None,
) -> tuple[str, dict[str, Any]]:
    """Clone a git repository to a local directory. Returns the path to the cloned repo."""
    return clone_repository(repoUrl, directory, branch).as_tool_output()


@tool("git_checkout", args_schema=GitCheckoutArgs, response_format="content_and_artifact")
def git_checkout(
    directory: str,
    target: str,
    createBranch: bool = False,
) -> tuple[str, dict[str, Any]]:
    """Checkout a branch or commit in a git repository"""
    return checkout_target(directory, target, createBranch).as_tool_output()


@tool("git_status", args_schema=GitStatusArgs, response_format="content_and_artifact")
def git_status(directory: str) -> tuple[str, dict[str, Any]]:
    """Check the status of a git repository"""
    return repository_status(directory).as_tool_output()


@tool("git_commit", args_schema=GitCommitArgs, response_format="content_and_artifact")
def git_commit(
    directory: str,
    message: str,
    addAll: bool = True,
) -> tuple[str, dict[str, Any]]:
    """Commit changes to a git repository"""
    return commit_changes(directory, message, addAll).as_tool_output()


@tool("git_push", args_schema=GitPushArgs, response_format="content_and_artifact")
def git_push(
    directory: str,
    remote: str = "origin",
    branch: str | None = None,
    setUpstream: bool = False,
) -> tuple[str, dict[str, Any]]:
    """Push commits to a remote repository"""
    return push_changes(directory, remote, branch, setUpstream).as_tool_output()


def get_git_tools() -> list:
    """Get all git LangChain tools for the agent.

    Returns:
        List of @tool decorated git functions.
    """
    return [
        git_clone,
        git_checkout,
        git_status,
        git_commit,
        git_push,
    ]
