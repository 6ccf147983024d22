"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one run.

    ``jobs`` and ``report_format`` fall back to the config document's options when unset.
    """

    config_path: str
    tests: tuple[str, ...] = ()
    suites: tuple[str, ...] = ()
    jobs: int | None = None
    output_path: str | None = None
    report_format: str | None = None
    quiet: bool = False


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    total: int
    passed: int
    failed: int
    selection_errors: tuple[str, ...] = ()
    resolution_errors: tuple[str, ...] = ()
    elapsed_seconds: float = 0.0
    report_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return not (self.failed or self.selection_errors or self.resolution_errors)
