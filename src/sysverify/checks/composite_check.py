"""Composite checks aggregating ordered child checks through a group policy."""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from .check_lifecycle import Check, CheckBase, CheckOutput
from .check_params import CheckParameterError
from .group_policy import GroupPolicy, GroupPolicyError

logger = logging.getLogger(__name__)


class CompositeCheck(CheckBase):
    """Runs children sequentially in declaration order, then applies the policy.

    Children are owned by the composite and never scheduled on their own.
    """

    child_label = "checks"

    def __init__(self, type_name: str, policy: GroupPolicy, type_version: int = 0) -> None:
        super().__init__(type_name, type_version)
        self._policy = policy if policy.name else replace(policy, name=type_name)
        self._children: tuple[Check, ...] = ()

    @property
    def policy(self) -> GroupPolicy:
        return self._policy

    @property
    def children(self) -> tuple[Check, ...]:
        return self._children

    def configure(self, args: Mapping[str, Any]) -> None:
        requirements = args.get("requirements")
        if requirements is not None:
            if not isinstance(requirements, Mapping):
                raise CheckParameterError("requirements must be a mapping.")
            try:
                self._policy = GroupPolicy.from_mapping(requirements, name=self.type_name)
            except GroupPolicyError as exc:
                raise CheckParameterError(str(exc)) from exc
        self._children = tuple(self.build_children(args))

    @abstractmethod
    def build_children(self, args: Mapping[str, Any]) -> Sequence[Check]:
        """Construct the ordered children described by ``args``."""

    def execute(self) -> None:
        try:
            self._policy.validate()
        except GroupPolicyError as exc:
            self._set_passed(False)
            self._add_error(exc)
            return

        if not self._children:
            self._set_passed(False)
            self._add_error(
                f"no {self.child_label} specified for '{self.id}' ({self.type_name}) check"
            )
            return

        passed: list[CheckOutput] = []
        failed: list[CheckOutput] = []
        for index, child in enumerate(self._children):
            if not child.id:
                child.set_id(f"{self.id}[{index}]")
            child.run()
            result = child.output()
            if result.passed:
                passed.append(result)
            else:
                failed.append(result)

        verdict, policy_error = self._policy.evaluate(len(passed), len(failed))
        self._set_passed(verdict)
        self._add_error(policy_error)
        logger.debug(
            "task '%s' received result %s, with %d successes and %d failures",
            self.id,
            verdict,
            len(passed),
            len(failed),
        )
        if verdict:
            return

        shown = self._policy.interesting(passed, failed)
        self._set_message([result.message for result in shown if result.message])
        self._add_error(
            f"group of {self.child_label} does not satisfy '{self.type_name}' requirements: "
            f"{len(passed)} passed, {len(failed)} failed"
        )
        for result in shown:
            self._add_error(result.error)
