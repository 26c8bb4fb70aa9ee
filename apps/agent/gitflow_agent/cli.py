"""Command line entry point for the GitFlow agent.

Usage:
    gitflow-agent chat [--model anthropic/claude-3-7-sonnet-latest]
    gitflow-agent serve [--host 127.0.0.1] [--port 18790]
"""

from __future__ import annotations

# Load environment variables from .env before reading agent_config
from dotenv import load_dotenv
load_dotenv()

import argparse
import logging
import sys
import uuid

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from gitflow_agent import agent_config

EXIT_COMMANDS = {"exit", "quit", ":q"}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else agent_config.LOG_LEVEL,
        format="[%(asctime)s] [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _render_result(console: Console, result: dict) -> None:
    for event in result.get("events", []):
        console.print(f"[dim]→ {event['tool_name']} {event['input']}[/dim]")
    style = "red" if result.get("error") else "green"
    console.print(Panel(Markdown(result["text"]), border_style=style))
    repo = result["repository"]
    details = [f"stage: {result['workflow_stage']}"]
    if repo.get("directory"):
        details.append(f"dir: {repo['directory']}")
    if repo.get("branch"):
        details.append(f"branch: {repo['branch']}")
    console.print(f"[dim]{' · '.join(details)}[/dim]")


def run_chat(model: str | None, console: Console | None = None, stdin=None) -> int:
    """Interactive chat loop on stdin; one session per process."""
    from gitflow_agent.runtime import run_turn

    console = console or Console()
    stdin = stdin or sys.stdin
    session_id = f"cli-{uuid.uuid4().hex[:8]}"
    console.print("[bold]GitFlow agent[/bold] (type 'exit' to quit)")

    while True:
        console.print("[bold cyan]you>[/bold cyan] ", end="")
        line = stdin.readline()
        if not line:
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in EXIT_COMMANDS:
            break
        result = run_turn(session_id, text, model=model)
        _render_result(console, result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gitflow-agent", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    chat = sub.add_parser("chat", help="Chat with the agent in the terminal")
    chat.add_argument("--model", default=None, help="Model identifier, e.g. openai/gpt-4o")

    serve = sub.add_parser("serve", help="Run the HTTP worker")
    serve.add_argument("--host", default=agent_config.WORKER_HOST)
    serve.add_argument("--port", type=int, default=agent_config.WORKER_PORT)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "serve":
        from gitflow_agent.worker import main as serve

        serve(host=args.host, port=args.port)
        return 0
    return run_chat(args.model)


if __name__ == "__main__":
    raise SystemExit(main())
