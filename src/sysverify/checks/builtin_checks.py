"""Default registry populated with every built-in check type."""

from __future__ import annotations

from functools import lru_cache

from .check_registry import CheckRegistry
from .command_checks import register_command_checks
from .compiler_checks import register_compiler_checks
from .file_checks import register_file_checks
from .package_checks import register_package_checks
from .process_execution import ProcessRunner


def build_default_registry(
    *, run_command: ProcessRunner | None = None, allow_overwrite: bool = False
) -> CheckRegistry:
    """Build an isolated registry holding all built-in check types.

    ``run_command`` replaces the process launcher for every process-backed check type.
    The returned registry is not frozen so callers may add their own types first.
    """
    registry = CheckRegistry(allow_overwrite=allow_overwrite)
    register_command_checks(registry, run_command=run_command)
    register_file_checks(registry)
    register_package_checks(registry, run_command=run_command)
    register_compiler_checks(registry, run_command=run_command)
    return registry


@lru_cache(maxsize=1)
def default_registry() -> CheckRegistry:
    """Return the shared, frozen process-wide registry."""
    return build_default_registry().freeze()
