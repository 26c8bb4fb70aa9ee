"""Centralized agent configuration for GitFlow.

Reads from environment variables with sensible defaults.
"""

from __future__ import annotations

import os

# Model selection ("provider/model" or bare model name). Empty means auto-detect.
MODEL: str = os.environ.get("GITFLOW_MODEL", "")

# Overrides the built-in system prompt template when set
SYSTEM_PROMPT: str = os.environ.get("GITFLOW_SYSTEM_PROMPT", "")

# Git execution
GIT_TIMEOUT: float = float(os.environ.get("GITFLOW_GIT_TIMEOUT", "120.0"))

# Turn loop hardening: model invocations allowed per user turn
MAX_MODEL_CALLS: int = int(os.environ.get("GITFLOW_MAX_MODEL_CALLS", "25"))

# Only successful tool calls advance the workflow stage
REQUIRE_TOOL_SUCCESS: bool = (
    os.environ.get("GITFLOW_REQUIRE_TOOL_SUCCESS", "false").lower() == "true"
)

# Worker
WORKER_HOST: str = os.environ.get("GITFLOW_WORKER_HOST", "127.0.0.1")
WORKER_PORT: int = int(os.environ.get("GITFLOW_WORKER_PORT", "18790"))

# Logging
LOG_LEVEL: str = os.environ.get("GITFLOW_LOG_LEVEL", "INFO").upper()
