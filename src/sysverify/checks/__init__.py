"""Check domain exports."""

from .builtin_checks import build_default_registry, default_registry
from .check_lifecycle import Check, CheckBase, CheckError, CheckOutput, CheckState
from .check_params import CheckParameterError
from .check_registry import (
    CheckFactory,
    CheckRegistry,
    CheckRegistryError,
    DuplicateCheckTypeError,
    UnknownCheckTypeError,
)
from .command_checks import CommandGroupCheck, ShellOperationCheck
from .compiler_checks import CompileCheck, CompilerError, RunProgramCheck
from .composite_check import CompositeCheck
from .file_checks import FileExistenceCheck, FileGroupCheck
from .group_policy import POLICY_NAMES, GroupPolicy, GroupPolicyError
from .package_checks import PackageGroupCheck, PackageInstalledCheck, PackageManagerProbe
from .process_execution import ProcessLaunchError, ProcessResult, ProcessRunner, run_process

__all__ = [
    "Check",
    "CheckBase",
    "CheckError",
    "CheckOutput",
    "CheckState",
    "CheckParameterError",
    "CheckFactory",
    "CheckRegistry",
    "CheckRegistryError",
    "DuplicateCheckTypeError",
    "UnknownCheckTypeError",
    "CompositeCheck",
    "POLICY_NAMES",
    "GroupPolicy",
    "GroupPolicyError",
    "ProcessLaunchError",
    "ProcessResult",
    "ProcessRunner",
    "run_process",
    "ShellOperationCheck",
    "CommandGroupCheck",
    "FileExistenceCheck",
    "FileGroupCheck",
    "PackageManagerProbe",
    "PackageInstalledCheck",
    "PackageGroupCheck",
    "CompilerError",
    "CompileCheck",
    "RunProgramCheck",
    "build_default_registry",
    "default_registry",
]
