"""Identity-preserving singletons.

A ``Singleton`` subclass gets exactly one instance, built eagerly when the
class body is executed (i.e. at import, under the import lock), so there is
no lazy initialization to race on.

Serialization support goes through an explicit "resolves to canonical
instance" step: on unpickling, a bare object is materialized and then
replaced by the result of ``resolve_canonical()``. Without that step every
round trip would mint a fresh instance.

Example:
    class Elvis(Singleton):
        pass

    assert Elvis.get_instance() is pickle.loads(pickle.dumps(Elvis()))
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Self, TypeVar, runtime_checkable

log = logging.getLogger(__name__)

# Name of the per-class slot that holds the canonical instance.
_CANONICAL = "_canonical"


@runtime_checkable
class Canonical(Protocol):
    """Anything that can substitute itself with its canonical instance."""

    def resolve_canonical(self) -> object: ...  # noqa: D102


def _restore(cls: type[Singleton]) -> Singleton:
    """Unpickling entry point for singletons.

    Materializes the decoded object, then hands back whatever its
    ``resolve_canonical()`` returns in its place.
    """
    fresh = object.__new__(cls)
    canonical = fresh.resolve_canonical()
    log.debug("Substituted canonical %s on deserialization", cls.__qualname__)
    return canonical  # type: ignore[return-value]


class Singleton:
    """Base class for stateless, process-wide marker values.

    Subclasses are final in spirit: the canonical instance is created in
    ``__init_subclass__`` and every public path (``get_instance()``, calling
    the class, ``copy``, ``deepcopy``, ``pickle``) yields that same object.
    Pass ``abstract=True`` to declare an intermediate base with no instance.
    """

    __slots__ = ()

    def __init_subclass__(cls, *, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "__init__" in cls.__dict__:
            raise TypeError(
                f"{cls.__qualname__} must not define __init__; singletons are stateless"
            )
        if abstract:
            return
        setattr(cls, _CANONICAL, object.__new__(cls))

    def __new__(cls) -> Self:
        return cls.get_instance()

    @classmethod
    def get_instance(cls) -> Self:
        """Return the one instance of *cls*."""
        try:
            return cls.__dict__[_CANONICAL]
        except KeyError:
            raise TypeError(
                f"{cls.__qualname__} has no instance; it is an abstract singleton base"
            ) from None

    def resolve_canonical(self) -> Self:
        """Return the canonical instance that stands in for *self*."""
        return type(self).get_instance()

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore, (type(self),))

    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__qualname__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__qualname__} is immutable")

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} singleton>"


S = TypeVar("S", bound=Singleton)


def instance_of(cls: type[S]) -> S:
    """Module-level accessor for a singleton's canonical instance."""
    return cls.get_instance()
