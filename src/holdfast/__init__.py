"""Holdfast: singletons that survive serialization, failures that survive cleanup.

Public API:
    - Singleton / instance_of(): process-wide, identity-preserving values
    - dumps() / loads(): serialization with canonical-instance resolution
    - Scope / acquire(): scoped release that keeps the primary failure
    - suppressed_of(): failures attached to a primary during cleanup
"""

from __future__ import annotations

import logging

from holdfast.codec import dumps, loads, round_trip
from holdfast.config import Settings, resolve_settings
from holdfast.errors import (
    ConfigurationError,
    DeserializationError,
    HoldfastError,
    ReleaseError,
    ScopeError,
    SerializationError,
    add_suppressed,
    format_failure,
    suppressed_of,
    walk_failures,
)
from holdfast.scope import Releasable, Scope, acquire, naive_scope
from holdfast.singleton import Canonical, Singleton, instance_of

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("holdfast")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("holdfast").addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Singleton
    "Singleton",
    "Canonical",
    "instance_of",
    # Serialization
    "dumps",
    "loads",
    "round_trip",
    # Scoped release
    "Scope",
    "Releasable",
    "acquire",
    "naive_scope",
    # Failures
    "add_suppressed",
    "suppressed_of",
    "walk_failures",
    "format_failure",
    # Configuration
    "Settings",
    "resolve_settings",
    # Exceptions
    "HoldfastError",
    "ConfigurationError",
    "SerializationError",
    "DeserializationError",
    "ScopeError",
    "ReleaseError",
]
