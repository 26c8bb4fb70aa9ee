"""Shared test utilities for GitFlow agent tests.

This package provides a scripted chat model and message factories.
"""
from .mock_llm import ScriptedChatModel, tool_call, tool_call_message

__all__ = [
    "ScriptedChatModel",
    "tool_call",
    "tool_call_message",
]
