"""Scoped resource acquisition that never loses the primary failure.

``Scope`` releases every resource exactly once on every exit path, last
acquired first. A release failure raised while the body's failure is in
flight is attached to it as a suppressed entry (see
``holdfast.errors.suppressed_of``) instead of replacing it; with no failure
in flight, the first release failure propagates and later ones are
suppressed under it.

``naive_scope`` is the plain try/finally it replaces, kept for comparison:
there the release failure wins and the body failure survives only as
implicit ``__context__``.
"""

from __future__ import annotations

from contextlib import contextmanager
import functools
import inspect
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from holdfast.errors import ScopeError, add_suppressed

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

log = logging.getLogger(__name__)

# Release operations looked up on a resource, in priority order.
_RELEASE_METHODS = ("release", "close", "aclose")


@runtime_checkable
class Releasable(Protocol):
    """A resource with a release operation called once at scope exit."""

    def release(self) -> None: ...  # noqa: D102


def _release_step(resource: Any) -> Callable[[], Any]:
    for name in _RELEASE_METHODS:
        method = getattr(resource, name, None)
        if callable(method):
            return method
    raise ScopeError(
        f"{type(resource).__qualname__} has no release operation",
        hint="Resources must define release(), close() or aclose().",
    )


class Scope:
    """Context manager (sync or async) over zero or more resources.

    Example:
        with Scope(open_conn(), open_cursor()) as (conn, cursor):
            cursor.execute(...)
    """

    def __init__(self, *resources: Any) -> None:
        self._resources = resources
        self._steps: list[Callable[[], Any]] = [_release_step(r) for r in resources]
        self._entered = False
        self._exited = False

    def defer(self, callback: Callable[..., Any], /, *args: Any, **kwargs: Any) -> None:
        """Register an extra release step; it runs before earlier ones."""
        if self._exited:
            raise ScopeError("Cannot defer on a scope that has already exited")
        self._steps.append(functools.partial(callback, *args, **kwargs))

    @property
    def exited(self) -> bool:
        return self._exited

    def _enter(self) -> Any:
        if self._entered:
            raise ScopeError(
                "Scope entered twice",
                hint="Create a new Scope for each with-block.",
            )
        self._entered = True
        if not self._resources:
            return self
        if len(self._resources) == 1:
            return self._resources[0]
        return self._resources

    def _drain(self) -> Iterator[Callable[[], Any]]:
        self._exited = True
        steps, self._steps = self._steps, []
        return reversed(steps)

    def _record(
        self, primary: BaseException | None, failure: Exception
    ) -> BaseException:
        if primary is None:
            log.debug("Release failed with no failure in flight: %r", failure)
            return failure
        if failure is not primary:
            add_suppressed(primary, failure)
            log.warning(
                "Release failure %r suppressed under %s",
                failure,
                type(primary).__name__,
            )
        return primary

    @staticmethod
    def _finish(
        exc: BaseException | None, primary: BaseException | None
    ) -> None:
        log.debug("Scope exited (failure=%r)", primary)
        if primary is not None and primary is not exc:
            raise primary

    def __enter__(self) -> Any:
        return self._enter()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        primary = exc
        for step in self._drain():
            try:
                result = step()
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise ScopeError(
                        "Release step returned an awaitable inside a sync scope",
                        hint="Use 'async with' for resources with async release.",
                    )
            except Exception as failure:
                primary = self._record(primary, failure)
        self._finish(exc, primary)

    async def __aenter__(self) -> Any:
        return self._enter()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        primary = exc
        for step in self._drain():
            try:
                result = step()
                if inspect.isawaitable(result):
                    await result
            except Exception as failure:
                primary = self._record(primary, failure)
        self._finish(exc, primary)


def acquire(*resources: Any) -> Scope:
    """Functional spelling of ``Scope(*resources)``."""
    return Scope(*resources)


@contextmanager
def naive_scope(resource: Any) -> Iterator[Any]:
    """Plain try/finally release; a failing release masks the body's failure."""
    release = _release_step(resource)
    try:
        yield resource
    finally:
        release()
