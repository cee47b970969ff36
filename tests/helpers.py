"""Test helpers (small, reusable doubles).

Classes that get pickled must live at module level, so they are kept here
rather than inside individual tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from holdfast.singleton import Singleton


class Marker(Singleton):
    """Concrete singleton used across the suite."""


class OtherMarker(Singleton):
    """A second, unrelated singleton."""


class MarkerBase(Singleton, abstract=True):
    """Abstract intermediate: no instance of its own."""


class DerivedMarker(MarkerBase):
    """Concrete singleton below an abstract base."""


class HookOnly:
    """Implements only the canonical-resolution capability, no custom pickling."""

    CANONICAL: ClassVar[HookOnly]

    def resolve_canonical(self) -> HookOnly:
        return type(self).CANONICAL


HookOnly.CANONICAL = HookOnly()


@dataclass
class Holder:
    """Object graph that embeds singletons."""

    items: list[Any] = field(default_factory=list)


@dataclass
class ScriptedResource:
    """Resource that records calls and fails on demand.

    ``log`` is shared between resources to observe release order.
    """

    name: str
    release_error: BaseException | None = None
    log: list[str] = field(default_factory=list)
    released: int = 0

    def release(self) -> None:
        self.released += 1
        self.log.append(f"release:{self.name}")
        if self.release_error is not None:
            raise self.release_error


@dataclass
class ClosingResource:
    """Resource that only offers the close() spelling."""

    closed: int = 0

    def close(self) -> None:
        self.closed += 1


@dataclass
class AsyncResource:
    """Resource with an async release."""

    release_error: Exception | None = None
    released: int = 0

    async def aclose(self) -> None:
        self.released += 1
        if self.release_error is not None:
            raise self.release_error
