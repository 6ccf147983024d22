"""Bounded worker pool that drives checks to completion."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from types import TracebackType

from sysverify.checks import Check

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.05


class SchedulerState(str, Enum):
    """Scheduler run phases; transitions only move forward.

    Checks may still be added while ``DISPATCHED``; draining closes submission.
    """

    COLLECTING = "collecting"
    DISPATCHED = "dispatched"
    DRAINING = "draining"
    DONE = "done"


class SchedulerError(Exception):
    """Base error for scheduler misuse and early drain returns."""


class SchedulerCancelledError(SchedulerError):
    """Raised when the run was cancelled before every check completed."""

    def __init__(self, pending: int) -> None:
        super().__init__(f"run cancelled with {pending} check(s) not completed")
        self.pending = pending


class SchedulerTimeoutError(SchedulerError):
    """Raised when the drain barrier timed out before every check completed."""

    def __init__(self, pending: int, timeout: float) -> None:
        super().__init__(f"timed out after {timeout}s with {pending} check(s) not completed")
        self.pending = pending
        self.timeout = timeout


class DuplicateSubmissionError(SchedulerError):
    """Raised when the same check object is submitted twice."""


@dataclass(frozen=True)
class SchedulerStats:
    """Counters describing submitted work."""

    total: int
    completed: int
    skipped: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


class CheckScheduler:  # pylint: disable=too-many-instance-attributes
    """Run checks on a fixed ``ThreadPoolExecutor`` with bounded submission.

    Every submitted check is handed to the pool exactly once, so no two workers ever run the
    same check. At most ``workers`` checks wait behind the running ones; ``add`` blocks until
    a slot frees up. ``wait`` is the drain barrier: it returns once every submitted check is
    completed and raises early on cancellation or timeout. After cancellation in-flight checks
    finish on their own, but queued checks are skipped without running.
    """

    def __init__(
        self,
        workers: int | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.workers = max(1, workers or os.cpu_count() or 1)
        self._slots = threading.BoundedSemaphore(self.workers * 2)
        self._cancel_event = cancel_event or threading.Event()
        self._condition = threading.Condition()
        self._submitted: list[Check] = []
        self._submitted_ids: set[int] = set()
        self._completed = 0
        self._skipped = 0
        self._executor: ThreadPoolExecutor | None = None
        self._state = SchedulerState.COLLECTING
        self._started_at: float | None = None

    def __enter__(self) -> CheckScheduler:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self.state is not SchedulerState.DONE:
            self.cancel()
            self._shutdown(join=False)

    @property
    def state(self) -> SchedulerState:
        with self._condition:
            return self._state

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def start(self) -> None:
        """Start the worker pool; the scheduler is dispatching from here on."""
        with self._condition:
            if self._executor is not None:
                return
            if self._state is SchedulerState.DONE:
                raise SchedulerError("scheduler has already finished and cannot restart")
            self._started_at = time.monotonic()
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="sysverify-worker"
            )
            self._state = SchedulerState.DISPATCHED

    def cancel(self) -> None:
        """Stop dispatching queued checks and release the drain barrier."""
        self._cancel_event.set()
        with self._condition:
            self._condition.notify_all()

    def add(self, check: Check) -> None:
        """Submit one check, blocking while every submission slot is taken."""
        with self._condition:
            if self._state not in (SchedulerState.COLLECTING, SchedulerState.DISPATCHED):
                raise SchedulerError(
                    f"cannot add check '{check.id}': scheduler is {self._state.value}"
                )
            if id(check) in self._submitted_ids:
                raise DuplicateSubmissionError(f"check '{check.id}' was already submitted")
            self._submitted_ids.add(id(check))
            self._submitted.append(check)
        self.start()

        while True:
            if self._cancel_event.is_set():
                raise SchedulerCancelledError(self.stats().pending)
            if self._slots.acquire(timeout=_POLL_SECONDS):
                break
        assert self._executor is not None
        self._executor.submit(self._run_check, check)

    def add_all(self, checks: Iterable[Check]) -> int:
        count = 0
        for check in checks:
            self.add(check)
            count += 1
        logger.info("registered %d checks", count)
        return count

    def stats(self) -> SchedulerStats:
        with self._condition:
            return SchedulerStats(
                total=len(self._submitted), completed=self._completed, skipped=self._skipped
            )

    def results(self) -> tuple[Check, ...]:
        """Return submitted checks in submission order."""
        with self._condition:
            return tuple(self._submitted)

    def wait(self, timeout: float | None = None) -> tuple[Check, ...]:
        """Block until every submitted check has completed, then stop the workers."""
        with self._condition:
            if self._state is SchedulerState.DONE:
                return tuple(self._submitted)
        self.start()

        deadline = None if timeout is None else time.monotonic() + timeout
        timed_out = False
        with self._condition:
            self._state = SchedulerState.DRAINING
            while self._completed < len(self._submitted):
                if self._cancel_event.is_set():
                    break
                wait_for = _POLL_SECONDS
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        timed_out = True
                        break
                    wait_for = min(wait_for, remaining)
                self._condition.wait(wait_for)
            pending = len(self._submitted) - self._completed
            total = len(self._submitted)
            self._state = SchedulerState.DONE

        if timed_out:
            self._cancel_event.set()
            self._shutdown(join=False)
            raise SchedulerTimeoutError(pending, timeout or 0.0)
        if pending:
            self._shutdown(join=False)
            raise SchedulerCancelledError(pending)

        self._shutdown(join=True)
        runtime = time.monotonic() - (self._started_at or time.monotonic())
        logger.info("checks complete in [num=%d, runtime=%.3fs]", total, runtime)
        return self.results()

    def _run_check(self, check: Check) -> None:
        ran = False
        try:
            if self._cancel_event.is_set():
                logger.debug("run cancelled, not dispatching check '%s'", check.id)
                with self._condition:
                    self._skipped += 1
                return
            ran = True
            check.run()
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("check '%s' escaped its own error handling", check.id)
        finally:
            self._slots.release()
            if ran:
                with self._condition:
                    self._completed += 1
                    self._condition.notify_all()

    def _shutdown(self, *, join: bool) -> None:
        # Queued checks still reach _run_check after a cancel so they are counted as skipped.
        if self._executor is not None:
            self._executor.shutdown(wait=join)


def run_checks(
    checks: Iterable[Check],
    workers: int | None = None,
    *,
    cancel_event: threading.Event | None = None,
    timeout: float | None = None,
) -> tuple[Check, ...]:
    """Schedule ``checks`` on a fresh scheduler and return them once all completed."""
    with CheckScheduler(workers, cancel_event=cancel_event) as scheduler:
        scheduler.add_all(checks)
        return scheduler.wait(timeout)
