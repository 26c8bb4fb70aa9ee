"""Scripted chat model for testing the turn loop.

Provides ScriptedChatModel, which replays a fixed sequence of AIMessages
(or exceptions to raise) without API calls and records what the loop sent it.
"""
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, SystemMessage


def tool_call(name: str, args: Any, call_id: str | None = None) -> dict[str, Any]:
    """Build a tool-call dict as found on ``AIMessage.tool_calls``."""
    return {"name": name, "args": args, "id": call_id or f"call-{name}"}


def tool_call_message(*calls: dict[str, Any], content: str = "") -> AIMessage:
    """Build a model turn that requests ``calls``."""
    return AIMessage(content=content, tool_calls=list(calls))


class ScriptedChatModel:
    """Stand-in for a chat model with ``bind_tools``/``invoke``.

    Usage:
        model = ScriptedChatModel([tool_call_message(tool_call("git_status", {...})),
                                   AIMessage(content="done")])
        run_turn("s1", "check status", model=model)
        assert model.call_count == 2
    """

    def __init__(self, responses: list[AIMessage | Exception] | None = None) -> None:
        self._responses = list(responses or [])
        self._index = 0
        self.calls: list[list[BaseMessage]] = []
        self.bound_tools: list[Any] = []

    def bind_tools(self, tools: list[Any], **kwargs: Any) -> "ScriptedChatModel":
        self.bound_tools = list(tools)
        return self

    def invoke(self, messages: list[BaseMessage], config: Any = None, **kwargs: Any) -> AIMessage:
        self.calls.append(list(messages))
        if self._index >= len(self._responses):
            return AIMessage(content="Default mock response")
        response = self._responses[self._index]
        self._index += 1
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def call_count(self) -> int:
        """Number of times invoke was called."""
        return len(self.calls)

    @property
    def system_prompts(self) -> list[str]:
        """System prompt sent with each call."""
        return [
            msgs[0].content for msgs in self.calls
            if msgs and isinstance(msgs[0], SystemMessage)
        ]


class FailingChatModel(ScriptedChatModel):
    """Chat model whose every call raises ``error``."""

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self.error = error

    def invoke(self, messages: list[BaseMessage], config: Any = None, **kwargs: Any) -> AIMessage:
        self.calls.append(list(messages))
        raise self.error
