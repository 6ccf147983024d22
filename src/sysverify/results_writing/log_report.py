"""Log-oriented renderers writing one record per check through ``sysverify.results``."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from sysverify.checks import CheckOutput

from .report_models import ReportWriteError, ResultsProducer, format_duration

RESULTS_LOGGER_NAME = "sysverify.results"


class LogReport(ResultsProducer):
    """Emit passed checks at INFO and failed checks at ERROR."""

    format_name = "log"

    def __init__(self, logger_name: str = RESULTS_LOGGER_NAME) -> None:
        super().__init__()
        self.logger_name = logger_name

    def format_record(self, output: CheckOutput) -> str:
        verdict = "passed" if output.passed else "failed"
        text = (
            f"check '{output.name}' ({output.check_type}) {verdict} in "
            f"{format_duration(output.elapsed_seconds)}"
        )
        if output.message:
            text += f"; message: {output.message}"
        if output.error:
            text += f"; error: {output.error}"
        return text

    def render(self) -> str:
        return "".join(f"{self.format_record(output)}\n" for output in self._outputs)

    def to_file(self, path: Path | str) -> None:
        destination = Path(path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(destination, encoding="utf-8")
        except OSError as exc:
            raise ReportWriteError(f"problem writing results to {destination}: {exc}") from exc
        self._emit(handler)
        self.raise_for_failures()

    def print_results(self, stream: TextIO | None = None) -> None:
        self._emit(logging.StreamHandler(stream or sys.stdout))
        self.raise_for_failures()

    def _emit(self, handler: logging.Handler) -> None:
        results_logger = logging.getLogger(self.logger_name)
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        handler.setLevel(logging.INFO)
        previous_level = results_logger.level
        previous_propagate = results_logger.propagate
        results_logger.addHandler(handler)
        results_logger.setLevel(logging.INFO)
        results_logger.propagate = False
        try:
            for output in self._outputs:
                level = logging.INFO if output.passed else logging.ERROR
                results_logger.log(level, self.format_record(output))
        finally:
            results_logger.removeHandler(handler)
            results_logger.setLevel(previous_level)
            results_logger.propagate = previous_propagate
            handler.close()


class JsonLogReport(LogReport):
    """Same as ``LogReport`` with each record serialized as one JSON object."""

    format_name = "log-json"

    def format_record(self, output: CheckOutput) -> str:
        return json.dumps(
            {
                "name": output.name,
                "type": output.check_type,
                "suites": list(output.suites),
                "completed": output.completed,
                "passed": output.passed,
                "message": output.message,
                "error": output.error,
                "elapsed": output.elapsed_seconds,
            },
            sort_keys=True,
        )
