"""Results producer contract shared by every report format."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

import click

from sysverify.checks import Check, CheckOutput

logger = logging.getLogger(__name__)


class ReportError(Exception):
    """Raised when results cannot be produced."""


class ReportWriteError(ReportError):
    """Raised when a rendered report cannot be written."""


class ChecksFailedError(ReportError):
    """Raised after rendering when at least one reported check did not pass."""

    def __init__(self, failed_count: int, total_count: int) -> None:
        super().__init__(f"{failed_count} checks failed")
        self.failed_count = failed_count
        self.total_count = total_count


class ResultsProducer(ABC):
    """Render completed checks in one output format.

    ``populate`` collects output snapshots; ``to_file`` and ``print_results`` render them and
    then raise ``ChecksFailedError`` when any reported check failed, so callers that only
    look at these calls still observe failure.
    """

    format_name = ""

    def __init__(self) -> None:
        self._outputs: list[CheckOutput] = []

    @property
    def outputs(self) -> tuple[CheckOutput, ...]:
        return tuple(self._outputs)

    @property
    def total_count(self) -> int:
        return len(self._outputs)

    @property
    def failed_count(self) -> int:
        return sum(1 for output in self._outputs if not output.passed)

    def populate(self, checks: Iterable[object]) -> None:
        invalid: list[str] = []
        for item in checks:
            if not isinstance(item, Check):
                invalid.append(type(item).__name__)
                continue
            self._outputs.append(item.output())
        if invalid:
            raise ReportError(
                f"{len(invalid)} result(s) do not implement the check interface: "
                f"{', '.join(invalid)}"
            )

    @abstractmethod
    def render(self) -> str:
        """Return the report text."""

    def to_file(self, path: Path | str) -> None:
        destination = Path(path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(self.render(), encoding="utf-8")
        except OSError as exc:
            raise ReportWriteError(f"problem writing results to {destination}: {exc}") from exc
        logger.info("wrote %s results to: %s", self.format_name, destination)
        self.raise_for_failures()

    def print_results(self, stream: TextIO | None = None) -> None:
        click.echo(self.render().rstrip("\n"), file=stream)
        self.raise_for_failures()

    def raise_for_failures(self) -> None:
        failed = self.failed_count
        if failed:
            raise ChecksFailedError(failed, self.total_count)


def format_duration(seconds: float) -> str:
    return f"{seconds:.3f}s"
