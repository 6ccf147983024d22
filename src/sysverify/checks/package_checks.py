"""Installed-package checks backed by system package managers."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .check_lifecycle import Check, CheckBase
from .check_params import require_args_mapping, require_string, string_sequence
from .check_registry import CheckRegistry
from .composite_check import CompositeCheck
from .group_policy import POLICY_NAMES, GroupPolicy
from .process_execution import ProcessLaunchError, ProcessRunner, run_process

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_COMMANDS: Mapping[str, tuple[str, ...]] = {
    "yum": ("yum", "list", "installed"),
    "dpkg": ("dpkg", "-l"),
    "brew": ("brew", "list"),
    "pacman": ("pacman", "-Q"),
    "pip": ("pip", "show"),
    "gem": ("gem", "list", "-i"),
}


@dataclass(frozen=True)
class PackageProbeResult:
    """Outcome of asking a package manager about one package."""

    package: str
    installed: bool
    output: str
    error: str | None = None
    queried: bool = True


class PackageManagerProbe:  # pylint: disable=too-few-public-methods
    """Query one package manager; exit status zero means the package is installed."""

    def __init__(
        self,
        manager: str,
        base_command: Sequence[str],
        *,
        run_command: ProcessRunner | None = None,
    ) -> None:
        self.manager = manager
        self.base_command = tuple(base_command)
        self._run_command = run_command or run_process

    def probe(self, package: str) -> PackageProbeResult:
        command = (*self.base_command, package)
        try:
            result = self._run_command(command)
        except ProcessLaunchError as exc:
            return PackageProbeResult(
                package=package,
                installed=False,
                output="",
                queried=False,
                error=f"{self.manager} package '{package}' could not be queried ({exc})",
            )
        output = result.output.strip("\n\t ")
        if not result.succeeded:
            return PackageProbeResult(
                package=package,
                installed=False,
                output=output,
                error=(
                    f"{self.manager} package '{package}' is not installed "
                    f"(exit code {result.returncode})"
                ),
            )
        return PackageProbeResult(package=package, installed=True, output=output)


class PackageInstalledCheck(CheckBase):
    """Assert that a package is installed, or that it is not."""

    def __init__(
        self, type_name: str, probe: PackageManagerProbe, *, should_be_installed: bool = True
    ) -> None:
        super().__init__(type_name)
        self.probe = probe
        self.should_be_installed = should_be_installed
        self.package = ""

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, ("package",))
        self.package = require_string(values, "package")

    def execute(self) -> None:
        result = self.probe.probe(self.package)
        if not result.queried:
            self._set_passed(False)
            self._add_error(result.error)
            return

        if not self.should_be_installed:
            self._set_passed(not result.installed)
            if result.error:
                logger.info(result.error)
            if result.installed:
                self._set_message(result.output)
                self._add_error(
                    f"package '{self.package}' exists (check={self.type_name}) and should not"
                )
            return

        self._set_passed(result.installed)
        if not result.installed:
            self._set_message(result.output)
            self._add_error(result.error)


class PackageGroupCheck(CompositeCheck):
    """Several packages judged together by a group policy."""

    child_label = "packages"

    def __init__(self, type_name: str, policy: GroupPolicy, probe: PackageManagerProbe) -> None:
        super().__init__(type_name, policy)
        self.probe = probe

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, ("packages", "requirements"))
        super().configure(values)

    def build_children(self, args: Mapping[str, Any]) -> Sequence[Check]:
        children: list[Check] = []
        for package in string_sequence(args, "packages"):
            child = PackageInstalledCheck(f"{self.probe.manager}-installed", self.probe)
            child.configure({"package": package})
            children.append(child)
        return children


def register_package_checks(
    registry: CheckRegistry, *, run_command: ProcessRunner | None = None
) -> None:
    """Register installed, not-installed and group checks for every package manager."""
    for manager, base_command in PACKAGE_MANAGER_COMMANDS.items():
        probe = PackageManagerProbe(manager, base_command, run_command=run_command)
        registry.register(
            f"{manager}-installed", _package_factory(f"{manager}-installed", probe, True)
        )
        registry.register(
            f"{manager}-not-installed", _package_factory(f"{manager}-not-installed", probe, False)
        )
        for policy_name in POLICY_NAMES:
            type_name = f"{manager}-group-{policy_name}"
            registry.register(type_name, _package_group_factory(type_name, policy_name, probe))


def _package_factory(type_name: str, probe: PackageManagerProbe, should_be_installed: bool):
    def factory() -> PackageInstalledCheck:
        return PackageInstalledCheck(type_name, probe, should_be_installed=should_be_installed)

    return factory


def _package_group_factory(type_name: str, policy_name: str, probe: PackageManagerProbe):
    def factory() -> PackageGroupCheck:
        return PackageGroupCheck(
            type_name, GroupPolicy.from_name(policy_name, name=type_name), probe
        )

    return factory
