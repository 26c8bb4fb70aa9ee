"""Model configuration and creation for the GitFlow agent.

Resolves a model identifier, or an already-built chat model, to a
LangChain chat model that the turn loop binds the workflow tools to.

Identifiers:
- ``provider/model`` (split at the first ``/``), e.g. ``anthropic/claude-3-7-sonnet-latest``
- a bare model name, provider inferred by ``init_chat_model``
"""

from __future__ import annotations

import logging
import os
from typing import Any

from langchain.chat_models import init_chat_model
from langchain_core.language_models import BaseChatModel

from gitflow_agent import agent_config
from gitflow_agent.errors import get_error_registry

logger = logging.getLogger("gitflow.model")

# ---------------------------------------------------------------------------
# Model instance cache – avoids re-creating on every turn
# ---------------------------------------------------------------------------
_model_cache: dict[str, BaseChatModel] = {}

DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-3-7-sonnet-latest",
    "openai": "gpt-4o",
    "openrouter": "anthropic/claude-3.7-sonnet",
    "google_genai": "gemini-2.0-flash",
    "kimi": "kimi-latest",
}

# Checked in order; the first key present selects the provider
_PROVIDER_KEYS: list[tuple[str, str]] = [
    ("ANTHROPIC_API_KEY", "anthropic"),
    ("OPENAI_API_KEY", "openai"),
    ("OPENROUTER_API_KEY", "openrouter"),
    ("GOOGLE_API_KEY", "google_genai"),
    ("KIMI_API_KEY", "kimi"),
]


def get_default_model() -> str:
    """Get the model identifier from the environment.

    ``GITFLOW_MODEL`` wins; otherwise the provider is auto-detected from
    the API keys present, defaulting to Anthropic.
    """
    configured = os.environ.get("GITFLOW_MODEL") or agent_config.MODEL
    if configured:
        return configured

    provider = "anthropic"
    for env_key, candidate in _PROVIDER_KEYS:
        if os.environ.get(env_key):
            provider = candidate
            break
    return f"{provider}/{DEFAULT_MODELS[provider]}"


def parse_model_identifier(identifier: str) -> tuple[str | None, str]:
    """Split ``provider/model`` into its parts; bare names have no provider."""
    provider, sep, model = identifier.partition("/")
    if not sep:
        return None, identifier
    return provider, model


def _create_openrouter_model(model_name: str) -> BaseChatModel:
    """Create a ChatOpenAI instance configured for OpenRouter."""
    api_key = os.environ.get("OPENROUTER_API_KEY")
    if not api_key:
        raise get_error_registry().create_error(
            "GF-INT-002",
            message=(
                "OPENROUTER_API_KEY environment variable is required when using OpenRouter. "
                "Get your API key from https://openrouter.ai/keys"
            ),
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=model_name,
        openai_api_key=api_key,
        openai_api_base="https://openrouter.ai/api/v1",
    )


def _create_kimi_model(model_name: str) -> BaseChatModel:
    """Create a ChatOpenAI instance configured for Kimi (Moonshot AI)."""
    api_key = os.environ.get("KIMI_API_KEY")
    if not api_key:
        raise get_error_registry().create_error(
            "GF-INT-002",
            message=(
                "KIMI_API_KEY environment variable is required when using Kimi. "
                "Get your API key from https://platform.moonshot.cn/"
            ),
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=model_name,
        openai_api_key=api_key,
        openai_api_base="https://api.moonshot.cn/v1",
    )


def _create_model(identifier: str) -> BaseChatModel:
    provider, model_name = parse_model_identifier(identifier)

    if provider == "openrouter":
        return _create_openrouter_model(model_name)
    if provider == "kimi":
        return _create_kimi_model(model_name)

    try:
        if provider is None:
            return init_chat_model(model_name)
        return init_chat_model(model_name, model_provider=provider)
    except (ImportError, ValueError) as e:
        raise get_error_registry().create_error(
            "GF-API-005",
            message=f"Could not load model '{identifier}': {e}",
            details={"model": identifier},
        ) from e


def load_chat_model(model: str | Any | None = None, *, use_cache: bool = True) -> Any:
    """Resolve ``model`` to a chat model instance.

    Args:
        model: A ``provider/model`` string, a bare model name, an already
            constructed chat model (returned unchanged), or None for
            ``get_default_model()``.
        use_cache: If True (default), return a cached instance when the
            identifier has been resolved before.

    Raises:
        GitflowError: ``GF-API-005`` if the model cannot be resolved,
            ``GF-INT-002`` if a required API key is missing.
    """
    if model is not None and not isinstance(model, str):
        return model

    identifier = model or get_default_model()
    if use_cache and identifier in _model_cache:
        logger.debug("Returning cached model instance for %s", identifier)
        return _model_cache[identifier]

    logger.info("Loading chat model %s", identifier)
    instance = _create_model(identifier)
    _model_cache[identifier] = instance
    return instance
