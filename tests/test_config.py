"""Settings resolution tests."""

from __future__ import annotations

import logging
import os
import pickle

import pytest

from holdfast import config
from holdfast.config import Settings, load_env, resolve_settings
from holdfast.errors import ConfigurationError

pytestmark = pytest.mark.unit


def test_defaults() -> None:
    cfg = resolve_settings()
    assert cfg.pickle_protocol == pickle.DEFAULT_PROTOCOL
    assert cfg.max_payload_bytes == 16 * 1024 * 1024
    assert cfg.log_level == "WARNING"
    assert cfg.log_level_number == logging.WARNING


def test_env_values_are_coerced(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOLDFAST_PICKLE_PROTOCOL", "2")
    monkeypatch.setenv("HOLDFAST_MAX_PAYLOAD_BYTES", " 1024 ")
    monkeypatch.setenv("HOLDFAST_LOG_LEVEL", "debug")

    cfg = resolve_settings()

    assert cfg.pickle_protocol == 2
    assert cfg.max_payload_bytes == 1024
    assert cfg.log_level == "DEBUG"


def test_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOLDFAST_PICKLE_PROTOCOL", "2")
    cfg = resolve_settings(overrides={"pickle_protocol": 4})
    assert cfg.pickle_protocol == 4


def test_blank_env_values_are_ignored() -> None:
    assert load_env({"HOLDFAST_LOG_LEVEL": "   "}) == {}


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"pickle_protocol": pickle.HIGHEST_PROTOCOL + 1}, "pickle_protocol"),
        ({"pickle_protocol": -1}, "pickle_protocol"),
        ({"max_payload_bytes": 0}, "max_payload_bytes"),
        ({"log_level": "LOUD"}, "log_level"),
        ({"unknown": 1}, "unknown"),
    ],
)
def test_invalid_values_raise_configuration_error(
    overrides: dict[str, object], field: str
) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_settings(overrides=overrides)
    assert field in str(excinfo.value)


def test_invalid_env_value_hint_names_variable(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("HOLDFAST_MAX_PAYLOAD_BYTES", "lots")
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_settings()
    assert excinfo.value.hint is not None
    assert "HOLDFAST_MAX_PAYLOAD_BYTES" in excinfo.value.hint


def test_settings_are_frozen() -> None:
    cfg = Settings()
    with pytest.raises(Exception):  # noqa: B017 - pydantic raises ValidationError
        cfg.pickle_protocol = 1  # type: ignore[misc]


# =============================================================================
# .env loading
# =============================================================================


@pytest.fixture
def dotenv_project(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Working directory with a .env, a private os.environ and a fresh load guard."""
    (tmp_path / ".env").write_text("HOLDFAST_LOG_LEVEL=DEBUG\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(os, "environ", dict(os.environ))
    monkeypatch.setattr(config, "_DOTENV_LOADED", False)
    return tmp_path


@pytest.mark.allow_dotenv
def test_dotenv_file_supplies_settings(dotenv_project) -> None:
    assert resolve_settings().log_level == "DEBUG"


@pytest.mark.allow_dotenv
def test_environment_wins_over_dotenv(
    dotenv_project, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HOLDFAST_LOG_LEVEL", "ERROR")
    assert resolve_settings().log_level == "ERROR"


@pytest.mark.allow_dotenv
def test_dotenv_is_read_once(dotenv_project, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[object] = []
    monkeypatch.setattr(
        config, "load_dotenv", lambda *args, **kwargs: calls.append(args)
    )

    resolve_settings()
    resolve_settings()

    assert len(calls) == 1


@pytest.mark.allow_env_pollution
def test_outer_environment_kept_when_opted_in(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOLDFAST_PICKLE_PROTOCOL", "2")
    assert load_env()["pickle_protocol"] == "2"
