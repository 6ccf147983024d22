"""Boundary for launching external processes from checks."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ProcessLaunchError(Exception):
    """Raised when an external command cannot be started at all."""


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and combined stdout/stderr of one finished process."""

    args: tuple[str, ...]
    returncode: int
    output: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def command_text(self) -> str:
        return shlex.join(self.args)


class ProcessRunner(Protocol):  # pylint: disable=too-few-public-methods
    """Callable used by checks to run external commands."""

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult: ...


def run_process(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run one command to completion and capture combined output."""
    command = tuple(args)
    logger.info("running command: %s", shlex.join(command))
    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except (FileNotFoundError, PermissionError, NotADirectoryError) as exc:
        raise ProcessLaunchError(f"could not execute '{shlex.join(command)}': {exc}") from exc
    return ProcessResult(args=command, returncode=completed.returncode, output=completed.stdout)
