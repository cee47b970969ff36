"""Exception hierarchy and suppressed-failure records for Holdfast."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# Attribute under which the ordered suppressed list lives on an exception.
_SUPPRESSED_ATTR = "__suppressed__"


class HoldfastError(Exception):
    """Base exception for all Holdfast errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(HoldfastError):
    """Settings validation or resolution failed."""


class SerializationError(HoldfastError):
    """An object graph could not be encoded."""


class DeserializationError(HoldfastError):
    """An input byte stream was malformed or rejected."""


class ScopeError(HoldfastError):
    """A scope was misused (entered twice, or given an unreleasable object)."""


class ReleaseError(HoldfastError):
    """A resource failed to release.

    Resources may raise this from ``release()`` so callers can tell which
    resource misbehaved; any other exception type is handled the same way.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        resource: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.resource = resource


def add_suppressed(primary: BaseException, secondary: BaseException) -> None:
    """Append *secondary* to *primary*'s suppressed list.

    Entries keep insertion order and are never replaced. A traceback note is
    attached as well so an uncaught primary still shows what it suppressed.
    """
    if not isinstance(secondary, BaseException):
        raise TypeError(
            f"suppressed entry must be an exception, got {type(secondary).__name__}"
        )
    if secondary is primary:
        raise ValueError("an exception cannot suppress itself")

    entries: list[BaseException] | None = getattr(primary, _SUPPRESSED_ATTR, None)
    if entries is None:
        entries = []
        setattr(primary, _SUPPRESSED_ATTR, entries)
    entries.append(secondary)
    primary.add_note(f"Suppressed: {_describe(secondary)}")


def suppressed_of(exc: BaseException) -> tuple[BaseException, ...]:
    """Return the suppressed entries of *exc*, oldest first."""
    return tuple(getattr(exc, _SUPPRESSED_ATTR, ()))


def walk_failures(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc*, its ``__cause__``/``__context__`` chain and suppressed entries.

    Each exception is yielded once, even when the graph contains cycles.
    """
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        # Pushed in reverse so suppressed entries come out in insertion order.
        stack.extend(reversed(suppressed_of(cur)))
        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException) and context is not cause:
            stack.append(context)


def format_failure(exc: BaseException, *, indent: int = 0) -> str:
    """Render *exc* and its suppressed tree as an indented diagnostic."""
    pad = "  " * indent
    lines = [f"{pad}{_describe(exc)}"]
    for entry in suppressed_of(exc):
        nested = format_failure(entry, indent=indent + 1).lstrip()
        lines.append(f"{pad}  Suppressed: {nested}")
    return "\n".join(lines)


def _describe(exc: BaseException) -> str:
    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name
