"""Side-by-side contrasts of naive and guarded code.

Each function returns plain data so the CLI can print it and tests can
assert on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, ClassVar

from holdfast import codec
from holdfast.errors import ReleaseError, suppressed_of
from holdfast.scope import Scope, naive_scope
from holdfast.singleton import Singleton

if TYPE_CHECKING:
    from holdfast.config import Settings

log = logging.getLogger(__name__)


class Elvis(Singleton):
    """There is only one."""


class NaiveElvis:
    """Eager singleton with no deserialization hook."""

    INSTANCE: ClassVar[NaiveElvis]

    @classmethod
    def get_instance(cls) -> NaiveElvis:
        return cls.INSTANCE


NaiveElvis.INSTANCE = NaiveElvis()


@dataclass
class FlakyResource:
    """Resource whose work and release fail on demand."""

    work_error: str | None = None
    release_error: str | None = None
    released: int = 0
    events: list[str] = field(default_factory=list)

    def do_work(self) -> None:
        self.events.append("work")
        if self.work_error is not None:
            raise RuntimeError(self.work_error)

    def release(self) -> None:
        self.released += 1
        self.events.append("release")
        if self.release_error is not None:
            raise ReleaseError(self.release_error, resource=type(self).__name__)


@dataclass(frozen=True)
class IdentityReport:
    label: str
    same_instance: bool


@dataclass(frozen=True)
class FailureReport:
    label: str
    message: str
    suppressed: tuple[str, ...]


def singleton_reports(settings: Settings | None = None) -> list[IdentityReport]:
    """Round-trip a naive and a guarded singleton and compare identities."""
    naive = NaiveElvis.get_instance()
    guarded = Elvis.get_instance()
    return [
        IdentityReport(
            "naive", codec.round_trip(naive, settings=settings) is naive
        ),
        IdentityReport(
            "guarded", codec.round_trip(guarded, settings=settings) is guarded
        ),
    ]


def suppression_reports(
    work_error: str = "A", release_error: str = "B"
) -> list[FailureReport]:
    """Run the same failing resource through try/finally and through Scope."""
    reports: list[FailureReport] = []

    resource = FlakyResource(work_error=work_error, release_error=release_error)
    try:
        with naive_scope(resource) as r:
            r.do_work()
    except Exception as e:
        reports.append(_report("naive", e))

    resource = FlakyResource(work_error=work_error, release_error=release_error)
    try:
        with Scope(resource) as r:
            r.do_work()
    except Exception as e:
        reports.append(_report("scoped", e))

    return reports


def _report(label: str, exc: BaseException) -> FailureReport:
    log.debug("%s variant raised %r", label, exc)
    return FailureReport(
        label=label,
        message=str(exc),
        suppressed=tuple(str(s) for s in suppressed_of(exc)),
    )
