"""Results writing domain exports."""

from .log_report import RESULTS_LOGGER_NAME, JsonLogReport, LogReport
from .output_options import OutputOptions
from .report_models import (
    ChecksFailedError,
    ReportError,
    ReportWriteError,
    ResultsProducer,
)
from .report_registry import (
    ResultsFactory,
    available_report_formats,
    get_results_factory,
    register_report_format,
)
from .summary_report import SummaryReport
from .transcript_report import TranscriptReport
from .workbook_report import CHECKS_SHEET_NAME, RUN_INFO_SHEET_NAME, WorkbookReport

__all__ = [
    "RESULTS_LOGGER_NAME",
    "CHECKS_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
    "ResultsProducer",
    "ResultsFactory",
    "ReportError",
    "ReportWriteError",
    "ChecksFailedError",
    "TranscriptReport",
    "SummaryReport",
    "LogReport",
    "JsonLogReport",
    "WorkbookReport",
    "OutputOptions",
    "available_report_formats",
    "get_results_factory",
    "register_report_format",
]
