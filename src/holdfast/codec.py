"""Pickle-backed serialization adapter.

``loads`` always runs the post-deserialize "resolves to canonical instance"
step on the decoded object, so values that implement ``Canonical`` without
customizing pickling still collapse to their canonical instance at the top
level. ``Singleton`` subclasses are resolved anywhere in the graph by their
own reduce hook.
"""

from __future__ import annotations

import logging
import pickle
from typing import TYPE_CHECKING, Any

from holdfast.config import resolve_settings
from holdfast.errors import DeserializationError, SerializationError
from holdfast.singleton import Canonical

if TYPE_CHECKING:
    from holdfast.config import Settings

log = logging.getLogger(__name__)

# Everything pickle.loads is documented (or known) to raise on bad input.
# Length fields are read before any allocation, so a short payload can still
# trigger MemoryError/OverflowError; opcodes that call importable functions
# surface whatever those raise (e.g. LookupError for a bad codec name).
_DECODE_ERRORS = (
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    LookupError,
    TypeError,
    ValueError,
    OverflowError,
    MemoryError,
)


def dumps(obj: Any, *, settings: Settings | None = None) -> bytes:
    """Encode *obj* with the configured pickle protocol."""
    cfg = settings or resolve_settings()
    try:
        return pickle.dumps(obj, protocol=cfg.pickle_protocol)
    except (pickle.PicklingError, TypeError, AttributeError) as e:
        raise SerializationError(
            f"Cannot serialize {type(obj).__qualname__}: {e}",
            hint="Only module-level classes and functions can be pickled.",
        ) from e


def loads(data: bytes, *, settings: Settings | None = None) -> Any:
    """Decode *data* and resolve the result to its canonical instance.

    Raises:
        DeserializationError: If *data* is not bytes, is too large, or is
            not a valid pickle stream.
    """
    cfg = settings or resolve_settings()
    if not isinstance(data, bytes | bytearray | memoryview):
        raise DeserializationError(
            f"Expected a bytes-like payload, got {type(data).__name__}"
        )
    size = memoryview(data).nbytes
    if size > cfg.max_payload_bytes:
        raise DeserializationError(
            f"Payload of {size} bytes exceeds the {cfg.max_payload_bytes} byte limit",
            hint="Raise HOLDFAST_MAX_PAYLOAD_BYTES if this input is trusted.",
        )
    try:
        decoded = pickle.loads(data)
    except _DECODE_ERRORS as e:
        raise DeserializationError(f"Malformed payload: {e}") from e

    if isinstance(decoded, Canonical) and not isinstance(decoded, type):
        resolved = decoded.resolve_canonical()
        if resolved is not decoded:
            log.debug(
                "Resolved decoded %s to its canonical instance",
                type(decoded).__qualname__,
            )
        return resolved
    return decoded


def round_trip(obj: Any, *, settings: Settings | None = None) -> Any:
    """Serialize then deserialize *obj* with the same settings."""
    cfg = settings or resolve_settings()
    return loads(dumps(obj, settings=cfg), settings=cfg)
