"""Run execution domain exports."""

from .check_run_use_case import RunExecutionError, execute_check_run
from .check_scheduler import (
    CheckScheduler,
    DuplicateSubmissionError,
    SchedulerCancelledError,
    SchedulerError,
    SchedulerState,
    SchedulerStats,
    SchedulerTimeoutError,
    run_checks,
)
from .run_contracts import RunOutcome, RunRequest

__all__ = [
    "RunRequest",
    "RunOutcome",
    "RunExecutionError",
    "execute_check_run",
    "CheckScheduler",
    "SchedulerState",
    "SchedulerStats",
    "SchedulerError",
    "SchedulerCancelledError",
    "SchedulerTimeoutError",
    "DuplicateSubmissionError",
    "run_checks",
]
