from __future__ import annotations

import os

import pytest

from rolesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    require_env_var,
    require_env_vars,
)
from rolesync.config.env import env_int, optional_env_var


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_require_env_vars_restores_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_VAR", "123")

    assert os.getenv("TEMP_VAR") == "123"
    result = require_env_var("TEMP_VAR")
    assert result == "123"


def test_optional_env_var_strips_and_blanks_to_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PADDED_VAR", "  value  ")
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("PADDED_VAR") == "value"
    assert optional_env_var("BLANK_VAR") is None


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NUMERIC_VAR", "eight")

    with pytest.raises(ConfigurationError, match="NUMERIC_VAR"):
        env_int("NUMERIC_VAR", 1)
