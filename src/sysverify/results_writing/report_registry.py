"""Lookup of results producers by format name."""

from __future__ import annotations

from collections.abc import Callable

from .log_report import JsonLogReport, LogReport
from .report_models import ReportError, ResultsProducer
from .summary_report import SummaryReport
from .transcript_report import TranscriptReport
from .workbook_report import WorkbookReport

ResultsFactory = Callable[[], ResultsProducer]

_FACTORIES: dict[str, ResultsFactory] = {
    "gotest": TranscriptReport,
    "result": SummaryReport,
    "log": LogReport,
    "log-json": JsonLogReport,
    "workbook": WorkbookReport,
}


def available_report_formats() -> tuple[str, ...]:
    return tuple(sorted(_FACTORIES))


def get_results_factory(format_name: str) -> ResultsFactory:
    try:
        return _FACTORIES[format_name]
    except KeyError as exc:
        raise ReportError(
            f"no results format named '{format_name}' "
            f"(available: {', '.join(available_report_formats())})"
        ) from exc


def register_report_format(format_name: str, factory: ResultsFactory) -> None:
    """Add a results format; existing names cannot be replaced."""
    if not format_name:
        raise ReportError("results format name must not be empty")
    if format_name in _FACTORIES:
        raise ReportError(f"results format '{format_name}' is already registered")
    _FACTORIES[format_name] = factory
