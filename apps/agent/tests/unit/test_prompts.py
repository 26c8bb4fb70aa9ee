"""Unit tests for prompts.py and configuration.py."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from gitflow_agent import agent_config
from gitflow_agent.configuration import Configuration
from gitflow_agent.prompts import (
    STAGE_GUIDANCE,
    SYSTEM_PROMPT_TEMPLATE,
    build_system_prompt,
    format_repository_context,
)
from gitflow_agent.workflow_state import STAGE_ORDER, RepositoryInfo, WorkflowStage

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


class TestBuildSystemPrompt:
    """Tests for build_system_prompt()."""

    def test_substitutes_system_time(self):
        prompt = build_system_prompt(SYSTEM_PROMPT_TEMPLATE, WorkflowStage.INITIALIZE, RepositoryInfo(), NOW)
        assert "{system_time}" not in prompt
        assert "System time: 2025-01-02T03:04:05+00:00" in prompt

    def test_template_without_token_gets_time_appended(self):
        prompt = build_system_prompt("Be brief.", WorkflowStage.INITIALIZE, RepositoryInfo(), NOW)
        assert prompt.startswith("Be brief.\nTime: 2025-01-02T03:04:05+00:00")

    @pytest.mark.parametrize("stage", STAGE_ORDER)
    def test_stage_and_guidance(self, stage):
        prompt = build_system_prompt(SYSTEM_PROMPT_TEMPLATE, stage, RepositoryInfo(), NOW)
        assert f"Current workflow step: {stage.value}" in prompt
        assert prompt.endswith(STAGE_GUIDANCE[stage])

    def test_no_repository_section_before_clone(self):
        prompt = build_system_prompt("T", WorkflowStage.INITIALIZE, RepositoryInfo(), NOW)
        assert "Repository:" not in prompt

    def test_repository_section_after_clone(self):
        repo = RepositoryInfo().with_clone("https://x/y/z.git").with_modified_file("README.md")
        prompt = build_system_prompt("T", WorkflowStage.MODIFY, repo, NOW)
        assert "Repository: https://x/y/z.git\nLocal directory: ./z" in prompt
        assert "Modified files: README.md" in prompt

    def test_defaults_to_current_time(self):
        prompt = build_system_prompt("T", WorkflowStage.INITIALIZE, RepositoryInfo())
        assert f"Time: {datetime.now(UTC).year}" in prompt


@pytest.mark.unit
def test_guidance_for_every_stage():
    assert set(STAGE_GUIDANCE) == set(WorkflowStage)
    assert "clone" in STAGE_GUIDANCE[WorkflowStage.INITIALIZE]


@pytest.mark.unit
def test_format_repository_context_with_branch():
    repo = RepositoryInfo(url="u", directory="./u", branch="dev")
    assert format_repository_context(repo) == "Repository: u\nLocal directory: ./u\nBranch: dev"


class TestConfiguration:
    """Tests for Configuration.from_runnable_config()."""

    def test_defaults(self, monkeypatch):
        monkeypatch.setattr(agent_config, "SYSTEM_PROMPT", "")
        configuration = Configuration.from_runnable_config({})
        assert configuration.model is None
        assert configuration.system_prompt_template == SYSTEM_PROMPT_TEMPLATE
        assert configuration.max_model_calls == agent_config.MAX_MODEL_CALLS

    def test_prompt_override_from_environment(self, monkeypatch):
        monkeypatch.setattr(agent_config, "SYSTEM_PROMPT", "Custom {system_time}")
        assert Configuration().system_prompt_template == "Custom {system_time}"

    def test_configurable_values(self):
        configuration = Configuration.from_runnable_config(
            {"configurable": {"model": "openai/gpt-4o", "max_model_calls": 3, "thread_id": "t"}}
        )
        assert configuration.model == "openai/gpt-4o"
        assert configuration.max_model_calls == 3

    def test_none_values_fall_back_to_defaults(self):
        configuration = Configuration.from_runnable_config({"configurable": {"max_model_calls": None}})
        assert configuration.max_model_calls == agent_config.MAX_MODEL_CALLS

    def test_none_config(self):
        assert isinstance(Configuration.from_runnable_config(None), Configuration)
