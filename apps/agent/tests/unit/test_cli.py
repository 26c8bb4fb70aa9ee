"""Unit tests for the command line entry point (cli.py)."""

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from gitflow_agent.cli import build_parser, main, run_chat


def _result(text="done", **overrides):
    result = {
        "session_id": "cli-x",
        "text": text,
        "events": [],
        "workflow_stage": "explore",
        "repository": {"url": "u", "directory": "./z", "branch": None, "filesModified": []},
        "usage": None,
    }
    result.update(overrides)
    return result


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=100, color_system=None)


class TestParser:

    def test_chat_model(self):
        args = build_parser().parse_args(["chat", "--model", "openai/gpt-4o"])
        assert args.command == "chat"
        assert args.model == "openai/gpt-4o"

    def test_serve_port(self):
        args = build_parser().parse_args(["serve", "--port", "9001"])
        assert args.port == 9001

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRunChat:

    def test_turns_until_exit(self, console):
        stdin = io.StringIO("clone it\n\nexit\nnever sent\n")
        with patch("gitflow_agent.runtime.run_turn", return_value=_result("Cloned.")) as run_turn:
            assert run_chat("openai/gpt-4o", console=console, stdin=stdin) == 0
        run_turn.assert_called_once()
        session_id, text = run_turn.call_args.args
        assert session_id.startswith("cli-")
        assert text == "clone it"
        assert run_turn.call_args.kwargs == {"model": "openai/gpt-4o"}
        output = console.file.getvalue()
        assert "Cloned." in output
        assert "stage: explore" in output

    def test_same_session_for_all_turns(self, console):
        stdin = io.StringIO("one\ntwo\n")
        with patch("gitflow_agent.runtime.run_turn", return_value=_result()) as run_turn:
            run_chat(None, console=console, stdin=stdin)
        sessions = {call.args[0] for call in run_turn.call_args_list}
        assert len(sessions) == 1
        assert run_turn.call_count == 2

    def test_renders_events_and_errors(self, console):
        result = _result(
            "Error: LLM API error",
            events=[{"tool_name": "git_status", "input": {"directory": "./z"}, "status": "requested"}],
            error={"code": "GF-API-001"},
        )
        with patch("gitflow_agent.runtime.run_turn", return_value=result):
            run_chat(None, console=console, stdin=io.StringIO("status\n"))
        output = console.file.getvalue()
        assert "git_status" in output
        assert "LLM API error" in output


@pytest.mark.unit
def test_main_serve_starts_worker():
    with patch("gitflow_agent.worker.main") as serve:
        assert main(["serve", "--host", "0.0.0.0", "--port", "9002"]) == 0
    serve.assert_called_once_with(host="0.0.0.0", port=9002)


@pytest.mark.unit
def test_main_chat():
    with patch("gitflow_agent.cli.run_chat", return_value=0) as chat:
        assert main(["chat", "--model", "kimi/kimi-latest"]) == 0
    chat.assert_called_once_with("kimi/kimi-latest")
