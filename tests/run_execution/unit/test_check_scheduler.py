"""Check scheduler tests."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import pytest
from sysverify.checks import CheckBase
from sysverify.run_execution import (
    CheckScheduler,
    DuplicateSubmissionError,
    SchedulerCancelledError,
    SchedulerError,
    SchedulerState,
    SchedulerTimeoutError,
    run_checks,
)


class _PassingCheck(CheckBase):
    def __init__(self, name: str, tracker: _ConcurrencyTracker | None = None) -> None:
        super().__init__("passing")
        self.set_id(name)
        self.tracker = tracker
        self.runs = 0

    def configure(self, args) -> None:
        return None

    def execute(self) -> None:
        self.runs += 1
        if self.tracker is not None:
            self.tracker.enter()
            time.sleep(0.01)
            self.tracker.leave()
        self._set_passed(True)


class _BlockingCheck(CheckBase):
    def __init__(self, name: str) -> None:
        super().__init__("blocking")
        self.set_id(name)
        self.started = threading.Event()
        self.release = threading.Event()

    def configure(self, args) -> None:
        return None

    def execute(self) -> None:
        self.started.set()
        self.release.wait(timeout=5)
        self._set_passed(True)


class _ExplodingCheck:
    def __init__(self) -> None:
        self.id = "exploding"

    def run(self) -> None:
        raise RuntimeError("escaped")


class _ConcurrencyTracker:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def enter(self) -> None:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)

    def leave(self) -> None:
        with self._lock:
            self.active -= 1


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_fifty_checks_on_four_workers_all_complete() -> None:
    tracker = _ConcurrencyTracker()
    checks = [_PassingCheck(f"check-{index}", tracker) for index in range(50)]

    finished = run_checks(checks, workers=4)

    assert finished == tuple(checks)
    assert all(check.output().completed for check in checks)
    assert all(check.output().passed for check in checks)
    assert all(check.runs == 1 for check in checks)
    assert tracker.peak <= 4


def test_wait_returns_only_after_every_check_completed() -> None:
    blocker = _BlockingCheck("slow")
    scheduler = CheckScheduler(2)
    scheduler.add(blocker)
    scheduler.add(_PassingCheck("fast"))
    releaser = threading.Timer(0.2, blocker.release.set)
    releaser.start()

    finished = scheduler.wait(timeout=5)

    assert all(check.completed for check in finished)
    assert scheduler.state is SchedulerState.DONE
    assert scheduler.stats().pending == 0


def test_state_is_dispatched_while_checks_are_running() -> None:
    blocker = _BlockingCheck("running")
    scheduler = CheckScheduler(2)
    assert scheduler.state is SchedulerState.COLLECTING

    scheduler.add(blocker)
    assert blocker.started.wait(timeout=5)
    assert scheduler.state is SchedulerState.DISPATCHED
    scheduler.add(_PassingCheck("late"))

    blocker.release.set()
    finished = scheduler.wait(timeout=5)

    assert len(finished) == 2
    assert scheduler.state is SchedulerState.DONE


def test_add_blocks_only_once_every_submission_slot_is_taken() -> None:
    blockers = [_BlockingCheck(f"blocker-{index}") for index in range(2)]
    scheduler = CheckScheduler(1)
    for blocker in blockers:
        scheduler.add(blocker)
    third = _PassingCheck("third")
    adder = threading.Thread(target=scheduler.add, args=(third,))
    adder.start()

    adder.join(timeout=0.2)
    assert adder.is_alive() is True
    for blocker in blockers:
        blocker.release.set()
    adder.join(timeout=5)
    scheduler.wait(timeout=5)

    assert third.runs == 1


def test_cancellation_stops_dispatch_and_releases_the_barrier() -> None:
    blocker = _BlockingCheck("blocker")
    queued = _PassingCheck("queued")
    scheduler = CheckScheduler(1)
    scheduler.add(blocker)
    assert blocker.started.wait(timeout=5)
    scheduler.add(queued)

    scheduler.cancel()
    blocker.release.set()
    with pytest.raises(SchedulerCancelledError) as excinfo:
        scheduler.wait()

    assert excinfo.value.pending >= 1
    assert _wait_until(lambda: scheduler.stats().skipped == 1)
    assert blocker.completed is True
    assert queued.runs == 0
    assert queued.completed is False


def test_external_cancel_event_is_honoured() -> None:
    cancel_event = threading.Event()
    cancel_event.set()
    scheduler = CheckScheduler(1, cancel_event=cancel_event)

    with pytest.raises(SchedulerCancelledError):
        scheduler.add(_PassingCheck("never"))
    assert scheduler.cancelled is True


def test_timeout_is_distinct_from_cancellation() -> None:
    blocker = _BlockingCheck("stuck")
    scheduler = CheckScheduler(1)
    scheduler.add(blocker)
    try:
        with pytest.raises(SchedulerTimeoutError) as excinfo:
            scheduler.wait(timeout=0.1)
    finally:
        blocker.release.set()

    assert excinfo.value.pending == 1
    assert scheduler.cancelled is True


def test_duplicate_submission_is_rejected() -> None:
    check = _PassingCheck("once")
    with CheckScheduler(1) as scheduler:
        scheduler.add(check)
        with pytest.raises(DuplicateSubmissionError):
            scheduler.add(check)
        scheduler.wait(timeout=5)

    assert check.runs == 1


def test_scheduler_does_not_restart_after_draining() -> None:
    scheduler = CheckScheduler(1)
    scheduler.add(_PassingCheck("first"))
    scheduler.wait(timeout=5)

    with pytest.raises(SchedulerError, match="scheduler is done"):
        scheduler.add(_PassingCheck("second"))
    assert scheduler.wait() == scheduler.results()


def test_empty_run_returns_immediately() -> None:
    assert run_checks([], workers=2) == ()


def test_check_escaping_its_error_handling_still_counts_as_completed() -> None:
    exploding = _ExplodingCheck()
    finished = run_checks([exploding, _PassingCheck("fine")], workers=2)  # type: ignore[list-item]

    assert len(finished) == 2
