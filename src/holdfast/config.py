"""Configuration: validated, frozen settings resolved from env and overrides.

Resolution order is defaults, then ``HOLDFAST_*`` environment variables
(including a project ``.env``), then explicit overrides.
"""

from __future__ import annotations

import logging
import os
import pickle
from typing import TYPE_CHECKING, Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from holdfast.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_PREFIX = "HOLDFAST_"

# Field name -> environment variable
_ENV_VARS: dict[str, str] = {
    "pickle_protocol": f"{ENV_PREFIX}PICKLE_PROTOCOL",
    "max_payload_bytes": f"{ENV_PREFIX}MAX_PAYLOAD_BYTES",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}

_DEFAULT_MAX_PAYLOAD_BYTES = 16 * 1024 * 1024


class Settings(BaseModel):
    """Schema and defaults for Holdfast settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    pickle_protocol: int = Field(
        default=pickle.DEFAULT_PROTOCOL, ge=0, le=pickle.HIGHEST_PROTOCOL
    )
    max_payload_bytes: int = Field(default=_DEFAULT_MAX_PAYLOAD_BYTES, ge=1)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept level names case-insensitively; reject unknown names."""
        if not isinstance(v, str):
            return v
        name = v.strip().upper()
        if name not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {v!r}")
        return name

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]


def load_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect ``HOLDFAST_*`` values; type coercion is left to ``Settings``."""
    source = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for field, env_key in _ENV_VARS.items():
        raw = source.get(env_key)
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    return values


# python-dotenv is consulted once per process.
_DOTENV_LOADED: bool = False


def _load_dotenv_once() -> None:
    """Load a project ``.env`` (searched from the working directory) once.

    Variables already present in the environment are left untouched.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    load_dotenv(find_dotenv(usecwd=True), override=False)
    _DOTENV_LOADED = True


def resolve_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Resolve settings from defaults, environment and *overrides*.

    Raises:
        ConfigurationError: When a value fails validation.
    """
    _load_dotenv_once()
    merged: dict[str, Any] = {**load_env(), **(overrides or {})}
    try:
        return Settings(**merged)
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else "settings"
        env_key = _ENV_VARS.get(field)
        hint = f"Check {env_key} or the '{field}' override." if env_key else None
        raise ConfigurationError(
            f"Invalid setting '{field}': {first['msg']}", hint=hint
        ) from e
