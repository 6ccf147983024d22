"""Check capability contract and one-shot lifecycle base."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class CheckState(str, Enum):
    """Lifecycle state of one check."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


class CheckError(Exception):
    """Aggregated execution failure causes of one check, newline separated."""

    def __init__(self, causes: Sequence[str]) -> None:
        self.causes = tuple(causes)
        super().__init__("\n".join(self.causes))


@dataclass(frozen=True)
class CheckOutput:  # pylint: disable=too-many-instance-attributes
    """Consistent read-only snapshot of a check."""

    name: str
    check_type: str
    suites: tuple[str, ...]
    completed: bool
    passed: bool
    message: str
    error: str
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def elapsed_seconds(self) -> float:
        """Return wall time spent in run(), or zero when the check never ran."""
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()


@runtime_checkable
class Check(Protocol):
    """Capabilities every schedulable check provides."""

    @property
    def id(self) -> str: ...

    @property
    def type_name(self) -> str: ...

    @property
    def type_version(self) -> int: ...

    @property
    def suites(self) -> tuple[str, ...]: ...

    @property
    def completed(self) -> bool: ...

    def set_id(self, name: str) -> None: ...

    def set_suites(self, suites: Iterable[str]) -> None: ...

    def dependency(self) -> tuple[str, ...]: ...

    def set_dependency(self, names: Iterable[str]) -> None: ...

    def configure(self, args: Mapping[str, Any]) -> None: ...

    def run(self) -> None: ...

    def output(self) -> CheckOutput: ...

    def error(self) -> CheckError | None: ...


class CheckBase(ABC):  # pylint: disable=too-many-instance-attributes
    """Shared state and lifecycle for concrete check types.

    Subclasses implement ``execute`` and ``configure``. ``run`` wraps ``execute`` so the check
    always ends ``completed``, whatever happens inside the type-specific body, and a second call
    to ``run`` is a no-op.

    Fields are written only by the thread executing the check; every read and write goes
    through one lock so ``output`` never observes a torn state.
    """

    def __init__(self, type_name: str, type_version: int = 0) -> None:
        self._type_name = type_name
        self._type_version = type_version
        self._id = ""
        self._suites: tuple[str, ...] = ()
        self._dependency: tuple[str, ...] = ()
        self._state = CheckState.NOT_STARTED
        self._passed = False
        self._message = ""
        self._errors: list[str] = []
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, type={self._type_name!r})"

    @property
    def id(self) -> str:
        with self._lock:
            return self._id

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def type_version(self) -> int:
        return self._type_version

    @property
    def suites(self) -> tuple[str, ...]:
        with self._lock:
            return self._suites

    @property
    def state(self) -> CheckState:
        with self._lock:
            return self._state

    @property
    def completed(self) -> bool:
        return self.state is CheckState.COMPLETED

    @property
    def passed(self) -> bool:
        with self._lock:
            return self._passed

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def set_id(self, name: str) -> None:
        with self._lock:
            self._id = name

    def set_suites(self, suites: Iterable[str]) -> None:
        with self._lock:
            self._suites = tuple(suites)

    def dependency(self) -> tuple[str, ...]:
        """Return names of checks this check declares it depends on."""
        with self._lock:
            return self._dependency

    def set_dependency(self, names: Iterable[str]) -> None:
        with self._lock:
            self._dependency = tuple(names)

    @abstractmethod
    def configure(self, args: Mapping[str, Any]) -> None:
        """Apply type-specific parameters, raising CheckParameterError when malformed."""

    @abstractmethod
    def execute(self) -> None:
        """Type-specific body; records its outcome through the protected setters."""

    def run(self) -> None:
        with self._lock:
            if self._state is not CheckState.NOT_STARTED:
                logger.debug(
                    "check '%s' already %s, not running again", self._id, self._state.value
                )
                return
            self._state = CheckState.RUNNING
            self._started_at = datetime.now(UTC)

        try:
            self.execute()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("check '%s' (%s) raised during execution", self.id, self._type_name)
            self._set_passed(False)
            self._add_error(exc)
        finally:
            self._mark_complete()

    def output(self) -> CheckOutput:
        with self._lock:
            return CheckOutput(
                name=self._id,
                check_type=self._type_name,
                suites=self._suites,
                completed=self._state is CheckState.COMPLETED,
                passed=self._passed,
                message=self._message,
                error="\n".join(self._errors),
                started_at=self._started_at,
                finished_at=self._finished_at,
            )

    def error(self) -> CheckError | None:
        with self._lock:
            if not self._errors:
                return None
            return CheckError(self._errors)

    def _mark_complete(self) -> None:
        with self._lock:
            self._state = CheckState.COMPLETED
            self._finished_at = datetime.now(UTC)
            logger.debug("check '%s' completed, passed=%s", self._id, self._passed)

    def _set_passed(self, passed: bool) -> None:
        with self._lock:
            self._passed = passed

    def _set_message(self, message: object) -> None:
        with self._lock:
            self._message = _render_message(message)

    def _add_error(self, error: object) -> None:
        if error is None:
            return
        text = str(error)
        if not text:
            return
        with self._lock:
            self._errors.append(text)

    def _has_errors(self) -> bool:
        with self._lock:
            return bool(self._errors)


def _render_message(message: object) -> str:
    if isinstance(message, str):
        return message
    if isinstance(message, BaseException):
        return str(message)
    if isinstance(message, Sequence):
        return "\n".join(str(item) for item in message)
    return repr(message) if message is not None else ""
