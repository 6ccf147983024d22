"""File existence checks."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from .check_lifecycle import Check, CheckBase
from .check_params import require_args_mapping, require_string, string_sequence
from .check_registry import CheckRegistry
from .composite_check import CompositeCheck
from .group_policy import GroupPolicy

logger = logging.getLogger(__name__)

FILE_EXISTS = "file-exists"
FILE_DOES_NOT_EXIST = "file-does-not-exist"

FILE_GROUP_TYPES: Mapping[str, str] = {
    "all-files": "all",
    "any-file": "any",
    "one-file": "one",
    "no-files": "none",
}


def path_exists(path: str) -> bool:
    """Return True when stat succeeds and False when the path is not found.

    Any other stat failure (permissions, I/O) propagates as OSError.
    """
    try:
        os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


class FileExistenceCheck(CheckBase):
    """Assert that one path exists, or that it does not."""

    def __init__(self, type_name: str = FILE_EXISTS, *, should_exist: bool = True) -> None:
        super().__init__(type_name)
        self.should_exist = should_exist
        self.file_name = ""

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, ("name",))
        self.file_name = require_string(values, "name")

    def execute(self) -> None:
        verb = "should" if self.should_exist else "should not"
        try:
            exists = path_exists(self.file_name)
        except OSError as exc:
            self._set_passed(False)
            self._set_message(f"could not determine whether file '{self.file_name}' exists")
            self._add_error(f"stat failed for '{self.file_name}': {exc}")
            return

        state = "exists" if exists else "does not exist"
        message = f"file '{self.file_name}' {state} and {verb} exist"
        logger.debug(message)
        self._set_message(message)
        passed = exists == self.should_exist
        self._set_passed(passed)
        if not passed:
            self._add_error(f"file '{self.file_name}' {verb} exist")


class FileGroupCheck(CompositeCheck):
    """Existence of several files judged together by a group policy."""

    child_label = "files"

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, ("file_names", "requirements"))
        super().configure(values)

    def build_children(self, args: Mapping[str, Any]) -> Sequence[Check]:
        children: list[Check] = []
        for file_name in string_sequence(args, "file_names"):
            child = FileExistenceCheck()
            child.configure({"name": file_name})
            children.append(child)
        return children


def register_file_checks(registry: CheckRegistry) -> None:
    """Register single-file checks and the four file group policies."""
    registry.register(FILE_EXISTS, FileExistenceCheck)
    registry.register(
        FILE_DOES_NOT_EXIST, lambda: FileExistenceCheck(FILE_DOES_NOT_EXIST, should_exist=False)
    )
    for type_name, policy_name in FILE_GROUP_TYPES.items():
        registry.register(type_name, _file_group_factory(type_name, policy_name))


def _file_group_factory(type_name: str, policy_name: str):
    def factory() -> FileGroupCheck:
        return FileGroupCheck(type_name, GroupPolicy.from_name(policy_name, name=type_name))

    return factory
