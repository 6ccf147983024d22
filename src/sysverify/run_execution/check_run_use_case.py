"""Run execution use-case service."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from sysverify.checks import Check, CheckRegistry
from sysverify.configuration import (
    ConfigDocument,
    ConfigurationError,
    ResolvedChecks,
    load_configuration,
    resolve_checks,
)
from sysverify.results_writing import ChecksFailedError, OutputOptions, ReportError

from .check_scheduler import SchedulerCancelledError, SchedulerTimeoutError, run_checks
from .run_contracts import RunOutcome, RunRequest

logger = logging.getLogger(__name__)


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


def execute_check_run(
    request: RunRequest,
    *,
    registry: CheckRegistry | None = None,
    cancel_event: threading.Event | None = None,
    timeout: float | None = None,
) -> RunOutcome:
    """Load, resolve, select, run and report one set of checks."""
    started = time.monotonic()
    document = _load_document(request.config_path)
    options = document.options

    resolved = resolve_checks(document, registry)
    for error in resolved.errors:
        logger.error("resolution error: %s", error)
    if not resolved.ok and not options.continue_on_error:
        raise RunExecutionError(
            f"{len(resolved.errors)} configuration problem(s) in {request.config_path}:\n"
            + "\n".join(resolved.errors)
        )

    checks, selection_errors = _select_checks(resolved, request)
    output_options = _build_output_options(request, document)
    jobs = request.jobs or options.jobs
    if jobs < 1:
        raise RunExecutionError(f"jobs must be a positive integer, got {jobs}")

    finished = _run_selected(checks, jobs, cancel_event=cancel_event, timeout=timeout)

    report_error: str | None = None
    try:
        output_options.produce_results(finished)
    except ChecksFailedError as exc:
        report_error = str(exc)
    except ReportError as exc:
        raise RunExecutionError(f"problem producing results: {exc}") from exc

    failed = sum(1 for check in finished if not check.output().passed)
    return RunOutcome(
        total=len(finished),
        passed=len(finished) - failed,
        failed=failed,
        selection_errors=selection_errors,
        resolution_errors=resolved.errors,
        elapsed_seconds=time.monotonic() - started,
        report_error=report_error,
    )


def _load_document(config_path: str) -> ConfigDocument:
    try:
        return load_configuration(config_path)
    except ConfigurationError as exc:
        raise RunExecutionError(str(exc)) from exc


def _select_checks(
    resolved: ResolvedChecks, request: RunRequest
) -> tuple[tuple[Check, ...], tuple[str, ...]]:
    if not request.tests and not request.suites:
        return tuple(resolved.tests.values()), ()

    checks: list[Check] = []
    errors: list[str] = []
    for selected in resolved.select(request.tests, request.suites):
        if selected.check is None:
            logger.error("selection error: %s", selected.error)
            errors.append(selected.error or f"could not select '{selected.name}'")
            continue
        checks.append(selected.check)
    return tuple(checks), tuple(errors)


def _build_output_options(request: RunRequest, document: ConfigDocument) -> OutputOptions:
    try:
        return OutputOptions(
            output_path=Path(request.output_path) if request.output_path else None,
            report_format=request.report_format or document.options.report_format,
            quiet=request.quiet,
        )
    except ReportError as exc:
        raise RunExecutionError(str(exc)) from exc


def _run_selected(
    checks: Sequence[Check],
    jobs: int,
    *,
    cancel_event: threading.Event | None,
    timeout: float | None,
) -> tuple[Check, ...]:
    try:
        return run_checks(checks, jobs, cancel_event=cancel_event, timeout=timeout)
    except SchedulerTimeoutError as exc:
        raise RunExecutionError(f"run timed out: {exc}") from exc
    except SchedulerCancelledError as exc:
        raise RunExecutionError(f"run cancelled: {exc}") from exc
    except KeyboardInterrupt as exc:
        raise RunExecutionError("run interrupted before all checks completed") from exc
