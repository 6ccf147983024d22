"""Aggregation rule reducing child check outcomes to one verdict."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

POLICY_NAMES: tuple[str, ...] = ("all", "any", "one", "none")

T = TypeVar("T")


class GroupPolicyError(Exception):
    """Raised or returned when a group policy does not set exactly one requirement."""


@dataclass(frozen=True)
class GroupPolicy:
    """Exactly one of the four requirement flags must be set."""

    require_all: bool = False
    require_any: bool = False
    require_one: bool = False
    require_none: bool = False
    name: str = ""

    @classmethod
    def from_name(cls, policy_name: str, *, name: str = "") -> GroupPolicy:
        """Build the policy registered under ``all``, ``any``, ``one`` or ``none``."""
        normalized = policy_name.strip().lower()
        if normalized not in POLICY_NAMES:
            raise GroupPolicyError(f"unknown group policy '{policy_name}'")
        return cls(**{f"require_{normalized}": True}, name=name)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], *, name: str = "") -> GroupPolicy:
        """Build a policy from a ``{all, any, one, none}`` boolean mapping.

        The result is not validated here; a misconfigured mapping yields a policy whose
        ``validate`` fails, so the owning check fails before running any child.
        """
        unknown = sorted(set(values) - set(POLICY_NAMES))
        if unknown:
            raise GroupPolicyError(f"unknown group requirement keys: {', '.join(unknown)}")
        flags: dict[str, bool] = {}
        for key in POLICY_NAMES:
            value = values.get(key, False)
            if not isinstance(value, bool):
                raise GroupPolicyError(f"group requirement '{key}' must be a boolean")
            flags[f"require_{key}"] = value
        return cls(**flags, name=name)

    @property
    def flags(self) -> dict[str, bool]:
        return {
            "all": self.require_all,
            "any": self.require_any,
            "one": self.require_one,
            "none": self.require_none,
        }

    def validate(self) -> None:
        active = sum(1 for value in self.flags.values() if value)
        if active != 1:
            rendered = ", ".join(f"{key}={value}" for key, value in self.flags.items())
            raise GroupPolicyError(
                f"incorrectly configured group check for '{self.name}': "
                f"exactly one requirement must be set [{rendered}]"
            )

    def evaluate(self, pass_count: int, fail_count: int) -> tuple[bool, GroupPolicyError | None]:
        """Return the verdict for the given counts, or ``(False, error)`` when misconfigured."""
        try:
            self.validate()
        except GroupPolicyError as exc:
            return False, exc

        if self.require_all:
            return fail_count == 0, None
        if self.require_one:
            return pass_count == 1, None
        if self.require_any:
            return pass_count > 0, None
        return pass_count == 0, None

    def interesting(self, passed: Sequence[T], failed: Sequence[T]) -> list[T]:
        """Select the child outcomes that explain a failed verdict."""
        if self.require_none:
            return list(passed)
        if self.require_any or self.require_one:
            return [*passed, *failed]
        return list(failed)
