"""Per-run configuration for the git workflow graph.

Values travel in ``config["configurable"]``; anything not supplied falls
back to the environment-backed defaults in ``agent_config``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from langchain_core.runnables import RunnableConfig, ensure_config

from gitflow_agent import agent_config
from gitflow_agent.prompts import SYSTEM_PROMPT_TEMPLATE


def _default_template() -> str:
    return agent_config.SYSTEM_PROMPT or SYSTEM_PROMPT_TEMPLATE


@dataclass(kw_only=True)
class Configuration:
    """Configurable parameters of the git workflow agent.

    Attributes:
        model: ``provider/model`` identifier or a pre-built chat model.
            None selects the environment default.
        system_prompt_template: Base system prompt; ``{system_time}`` is
            substituted on every model call.
        max_model_calls: Model invocations allowed per run before the loop
            stops on its own.
        require_tool_success: Only successful tool calls advance the
            workflow stage and update repository metadata.
    """

    model: Any = None
    system_prompt_template: str = field(default_factory=_default_template)
    max_model_calls: int = field(default_factory=lambda: agent_config.MAX_MODEL_CALLS)
    require_tool_success: bool = field(
        default_factory=lambda: agent_config.REQUIRE_TOOL_SUCCESS
    )

    @classmethod
    def from_runnable_config(cls, config: RunnableConfig | None = None) -> Configuration:
        """Create a Configuration from a RunnableConfig, ignoring unknown keys."""
        configurable = ensure_config(config).get("configurable") or {}
        names = {f.name for f in fields(cls) if f.init}
        return cls(**{k: v for k, v in configurable.items() if k in names and v is not None})
