"""Pytest configuration and fixtures.

Provides environment isolation and shared settings. All fixtures here are
autouse unless noted.
"""

from __future__ import annotations

import os

import pytest

from holdfast.config import ENV_PREFIX, Settings

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    monkeypatch.setattr(
        "holdfast.config.load_dotenv", lambda *_args, **_kwargs: False
    )


@pytest.fixture(autouse=True)
def isolate_holdfast_env(request, monkeypatch):
    """Clear HOLDFAST_* env vars so host settings never leak into tests.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Default settings, resolved without touching the environment."""
    return Settings()
