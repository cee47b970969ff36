"""Walkthrough runner.

Examples:
- python -m holdfast singleton
- python -m holdfast suppression --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from holdfast.config import resolve_settings
from holdfast.walkthrough import singleton_reports, suppression_reports

if TYPE_CHECKING:
    from collections.abc import Sequence


def _run_singleton() -> None:
    for report in singleton_reports():
        print(f"{report.label:<8} same instance: {report.same_instance}")  # noqa: T201


def _run_suppression() -> None:
    for report in suppression_reports():
        print(f"{report.label:<8} caught: {report.message}")  # noqa: T201
        print(f"{'':<8} suppressed count: {len(report.suppressed)}")  # noqa: T201
        for message in report.suppressed:
            print(f"{'':<8}   - suppressed: {message}")  # noqa: T201


_COMMANDS = {
    "singleton": _run_singleton,
    "suppression": _run_suppression,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m holdfast",
        description="Contrast naive and guarded singleton and cleanup code.",
    )
    parser.add_argument("command", choices=sorted(_COMMANDS))
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log at DEBUG level."
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = resolve_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level_number,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _COMMANDS[args.command]()
    return 0


if __name__ == "__main__":
    sys.exit(main())
