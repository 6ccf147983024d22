"""Shell command checks and their composite groups."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from .check_lifecycle import Check, CheckBase
from .check_params import (
    mapping_sequence,
    optional_string,
    require_args_mapping,
    require_string,
    string_mapping,
)
from .check_registry import CheckRegistry
from .composite_check import CompositeCheck
from .group_policy import GroupPolicy
from .process_execution import ProcessLaunchError, ProcessRunner, run_process

logger = logging.getLogger(__name__)

SHELL_OPERATION = "shell-operation"
SHELL_OPERATION_ERROR = "shell-operation-error"

COMMAND_GROUP_TYPES: Mapping[str, str] = {
    "all-commands": "all",
    "any-command": "any",
    "one-command": "one",
    "no-commands": "none",
}

_SHELL_ARGS = ("command", "working_directory", "environment")


class ShellOperationCheck(CheckBase):
    """Run ``sh -c <command>`` and judge the exit status."""

    def __init__(
        self,
        type_name: str = SHELL_OPERATION,
        *,
        should_fail: bool = False,
        run_command: ProcessRunner | None = None,
    ) -> None:
        super().__init__(type_name)
        self.should_fail = should_fail
        self.command = ""
        self.working_directory = ""
        self.environment: dict[str, str] = {}
        self._run_command = run_command or run_process

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, _SHELL_ARGS)
        self.command = require_string(values, "command")
        self.working_directory = optional_string(values, "working_directory")
        self.environment = string_mapping(values, "environment")

    def execute(self) -> None:
        env = None
        if self.environment:
            env = {**os.environ, **self.environment}
        try:
            result = self._run_command(
                ("sh", "-c", self.command),
                cwd=self.working_directory or None,
                env=env,
            )
        except ProcessLaunchError as exc:
            self._set_passed(False)
            self._add_error(exc)
            message = (
                f"could not execute command, check {self.id} ({self.type_name}) "
                "automatically fails"
            )
            logger.debug(message)
            self._set_message(message)
            return

        command_failed = not result.succeeded
        passed = command_failed == self.should_fail
        self._set_passed(passed)
        if passed:
            logger.info("command '%s' output: %s", self.command, result.output.strip())
            return

        self._set_message(result.output)
        if command_failed:
            self._add_error(
                f"command failed with exit code {result.returncode}: '{self.command}'"
            )
        else:
            self._add_error(f"command succeeded but was expected to fail: '{self.command}'")


class CommandGroupCheck(CompositeCheck):
    """Ordered shell operations judged together by a group policy."""

    child_label = "commands"

    def __init__(
        self,
        type_name: str,
        policy: GroupPolicy,
        *,
        run_command: ProcessRunner | None = None,
    ) -> None:
        super().__init__(type_name, policy)
        self._run_command = run_command

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, ("commands", "requirements"))
        super().configure(values)

    def build_children(self, args: Mapping[str, Any]) -> Sequence[Check]:
        children: list[Check] = []
        for command_args in mapping_sequence(args, "commands"):
            child = ShellOperationCheck(run_command=self._run_command)
            child.configure(command_args)
            children.append(child)
        return children


def register_command_checks(
    registry: CheckRegistry, *, run_command: ProcessRunner | None = None
) -> None:
    """Register shell operations and the four command group policies."""
    registry.register(SHELL_OPERATION, lambda: ShellOperationCheck(run_command=run_command))
    registry.register(
        SHELL_OPERATION_ERROR,
        lambda: ShellOperationCheck(
            SHELL_OPERATION_ERROR, should_fail=True, run_command=run_command
        ),
    )
    for type_name, policy_name in COMMAND_GROUP_TYPES.items():
        registry.register(type_name, _command_group_factory(type_name, policy_name, run_command))


def _command_group_factory(type_name: str, policy_name: str, run_command: ProcessRunner | None):
    def factory() -> CommandGroupCheck:
        return CommandGroupCheck(
            type_name,
            GroupPolicy.from_name(policy_name, name=type_name),
            run_command=run_command,
        )

    return factory
