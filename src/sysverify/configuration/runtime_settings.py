"""Configuration domain entities."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_REPORT_FORMAT = "gotest"


def default_jobs() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class RunOptions:
    """Run-wide options declared in the configuration document."""

    continue_on_error: bool = False
    report_format: str = DEFAULT_REPORT_FORMAT
    jobs: int = field(default_factory=default_jobs)


@dataclass(frozen=True)
class TestDeclaration:
    """One raw test entry; ``args`` stay unparsed until resolution."""

    __test__ = False

    name: str
    suites: tuple[str, ...]
    check_type: str
    args: Mapping[str, Any] | None
    version: int | None = None


@dataclass(frozen=True)
class ConfigDocument:
    """Top-level configuration aggregate."""

    options: RunOptions
    tests: tuple[TestDeclaration, ...]
    path: Path | None = None

    @property
    def suite_names(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for declaration in self.tests:
            for suite in declaration.suites:
                seen.setdefault(suite, None)
        return tuple(seen)
