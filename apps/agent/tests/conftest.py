"""Shared pytest fixtures for GitFlow agent tests.

This module provides common fixtures and utilities for testing the agent.
Import these fixtures in your test files - they are automatically available.
"""
import subprocess
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import pytest

from utils.mock_llm import FailingChatModel, ScriptedChatModel


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary workspace and make it the working directory.

    Clone directories are relative to the process CWD, so tests that clone
    run inside this workspace.
    """
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    monkeypatch.chdir(workspace)
    return workspace


# ============================================================================
# Mock Model Fixtures
# ============================================================================

@pytest.fixture
def scripted_model() -> Callable[..., ScriptedChatModel]:
    """Factory for scripted chat models."""
    def _create(*responses) -> ScriptedChatModel:
        return ScriptedChatModel(list(responses))
    return _create


@pytest.fixture
def failing_model() -> Callable[[Exception], FailingChatModel]:
    return FailingChatModel


# ============================================================================
# Git Fixtures
# ============================================================================

class FakeGit:
    """Records git invocations and answers them with canned results."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.results: dict[str, subprocess.CompletedProcess] = {}

    def set_result(self, subcommand: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.results[subcommand] = subprocess.CompletedProcess(
            args=["git", subcommand], returncode=returncode, stdout=stdout, stderr=stderr
        )

    def __call__(self, args, cwd=None, **kwargs):
        self.calls.append({"args": list(args), "cwd": cwd, "kwargs": kwargs})
        subcommand = args[1] if len(args) > 1 else ""
        if subcommand in self.results:
            return self.results[subcommand]
        return subprocess.CompletedProcess(args=args, returncode=0, stdout="", stderr="")

    @property
    def commands(self) -> list[list[str]]:
        return [call["args"] for call in self.calls]


@pytest.fixture
def fake_git():
    """Patch subprocess.run inside the git tool with a FakeGit recorder."""
    fake = FakeGit()
    with patch("gitflow_agent.git_tool.subprocess.run", side_effect=fake):
        yield fake


# ============================================================================
# State Reset Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def _reset_agent_state():
    """Drop runtime sessions and cached models between tests."""
    import gitflow_agent.model_config as model_config
    import gitflow_agent.runtime as runtime

    runtime._agent = None
    runtime._checkpointer = None
    model_config._model_cache.clear()
    yield
    runtime._agent = None
    runtime._checkpointer = None
    model_config._model_cache.clear()


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove potentially interfering environment variables."""
    env_vars_to_remove = [
        "GITFLOW_MODEL",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "OPENROUTER_API_KEY",
        "GOOGLE_API_KEY",
        "KIMI_API_KEY",
    ]
    for var in env_vars_to_remove:
        monkeypatch.delenv(var, raising=False)
