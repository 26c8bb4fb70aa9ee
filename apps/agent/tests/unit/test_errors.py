"""Unit tests for errors.py."""

from __future__ import annotations

import pytest

from gitflow_agent.errors import (
    AGENT_ERRORS,
    ErrorDefinition,
    ErrorRegistry,
    GitflowError,
    get_error_registry,
)


@pytest.mark.unit
def test_error_definition_defaults():
    d = ErrorDefinition(code="X-001", message="test")
    assert d.http_status == 500
    assert d.retryable is False


@pytest.mark.unit
def test_gitflow_error_basic():
    err = GitflowError(code="GF-API-001", message="LLM API error")
    assert err.code == "GF-API-001"
    assert str(err) == "LLM API error"
    assert err.details == {}
    assert isinstance(err, Exception)


@pytest.mark.unit
def test_gitflow_error_to_dict():
    err = GitflowError(
        code="GF-TOOL-002",
        message="Tool not found",
        http_status=404,
        details={"tool": "rm_rf"},
    )
    assert err.to_dict() == {
        "error": {
            "code": "GF-TOOL-002",
            "message": "Tool not found",
            "http_status": 404,
            "retryable": False,
            "details": {"tool": "rm_rf"},
        }
    }


@pytest.mark.unit
def test_agent_errors_dict():
    assert all(code.startswith("GF-") for code in AGENT_ERRORS)
    for code, definition in AGENT_ERRORS.items():
        assert definition.code == code


@pytest.mark.unit
def test_error_registry_create_known():
    err = ErrorRegistry().create_error("GF-LOOP-001")
    assert str(err) == "Model call limit reached"
    assert err.http_status == 429


@pytest.mark.unit
def test_error_registry_message_override():
    err = ErrorRegistry().create_error("GF-API-001", message="provider timed out", details={"type": "Timeout"})
    assert str(err) == "provider timed out"
    assert err.retryable is True
    assert err.details == {"type": "Timeout"}


@pytest.mark.unit
def test_error_registry_create_unknown():
    err = ErrorRegistry().create_error("GF-NOPE-999")
    assert err.code == "GF-NOPE-999"
    assert str(err) == "Unknown error"
    assert err.http_status == 500


@pytest.mark.unit
def test_error_registry_lookups():
    registry = ErrorRegistry()
    assert registry.get_definition("GF-INT-003").http_status == 404
    assert registry.get_definition("missing") is None
    assert registry.get_all_definitions() == AGENT_ERRORS
    assert registry.is_retryable("GF-API-001") is True
    assert registry.is_retryable("GF-TOOL-001") is False
    assert registry.is_retryable("missing") is False


@pytest.mark.unit
def test_get_error_registry_singleton():
    assert get_error_registry() is get_error_registry()
