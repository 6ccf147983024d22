"""Compiler toolchain probes: compile, or compile and run, a small test body."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from .check_lifecycle import CheckBase
from .check_params import optional_string, require_args_mapping, require_string, string_sequence
from .check_registry import CheckRegistry
from .process_execution import ProcessLaunchError, ProcessRunner, run_process

logger = logging.getLogger(__name__)

TOOLCHAIN_GCC_CANDIDATES: tuple[str, ...] = (
    "/opt/mongodbtoolchain/v2/bin/gcc",
    "/opt/mongodbtoolchain/v1/bin/gcc",
    "/opt/mongodbtoolchain/bin/gcc",
)


class CompilerError(Exception):
    """Raised when a compiler is unusable or a test body fails to build or run."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class Compiler(Protocol):
    """Toolchain able to build and run a single-file test body."""

    binary: str

    def validate(self) -> None: ...

    def compile(self, source: str, cflags: Sequence[str] = ()) -> None: ...

    def compile_and_run(self, source: str, cflags: Sequence[str] = ()) -> str: ...


CompilerFactory = Callable[[], Compiler]


def validate_binary(binary: str, label: str) -> None:
    """Path-like binaries must exist; bare names must resolve on PATH."""
    if not binary:
        raise CompilerError(f"no {label} specified")
    if os.sep in binary:
        if not Path(binary).exists():
            raise CompilerError(f"{label} binary '{binary}' does not exist")
        return
    if shutil.which(binary) is None:
        raise CompilerError(f"{label} binary '{binary}' was not found on PATH")


class _ToolchainBase:
    label = "compiler"
    extension = "txt"

    def __init__(self, binary: str, *, run_command: ProcessRunner | None = None) -> None:
        self.binary = binary
        self._run_command = run_command or run_process

    def validate(self) -> None:
        validate_binary(self.binary, self.label)

    def _write_test_body(self, directory: Path, source: str) -> Path:
        source_path = directory / f"check_body.{self.extension}"
        source_path.write_text(source, encoding="utf-8")
        return source_path

    def _checked(self, args: Sequence[str], failure: str, *, cwd: Path | None = None) -> str:
        try:
            result = self._run_command(tuple(args), cwd=cwd)
        except ProcessLaunchError as exc:
            raise CompilerError(f"{failure}: {exc}") from exc
        if not result.succeeded:
            raise CompilerError(
                f"{failure} (exit code {result.returncode}): {result.command_text}",
                output=result.output,
            )
        return result.output


class GccCompiler(_ToolchainBase):
    """C toolchain driven through a gcc-compatible binary."""

    label = "compiler"
    extension = "c"

    def compile(self, source: str, cflags: Sequence[str] = ()) -> None:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            object_path = Path(workdir) / "check_body.o"
            self._checked(
                (self.binary, "-Werror", "-o", str(object_path), "-c", str(source_path), *cflags),
                "problem compiling test body",
            )

    def compile_and_run(self, source: str, cflags: Sequence[str] = ()) -> str:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            program_path = Path(workdir) / "check_body"
            self._checked(
                (self.binary, "-Werror", "-o", str(program_path), str(source_path), *cflags),
                "problem compiling test",
            )
            output = self._checked((str(program_path),), "problem running test program")
        return output.strip("\t\n ")


class GoCompiler(_ToolchainBase):
    """Go toolchain; ``cflags`` are passed as build flags."""

    label = "go binary"
    extension = "go"

    def compile(self, source: str, cflags: Sequence[str] = ()) -> None:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            output_path = Path(workdir) / "check_body"
            self._checked(
                (self.binary, "build", *cflags, "-o", str(output_path), str(source_path)),
                "problem compiling go test",
                cwd=Path(workdir),
            )

    def compile_and_run(self, source: str, cflags: Sequence[str] = ()) -> str:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            output = self._checked(
                (self.binary, "run", *cflags, str(source_path)),
                "problem running go program",
                cwd=Path(workdir),
            )
        return output.strip("\t\n ")


class PythonInterpreter(_ToolchainBase):
    """Python interpreter; compiling means byte-compiling the script."""

    label = "python interpreter"
    extension = "py"

    def compile(self, source: str, cflags: Sequence[str] = ()) -> None:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            self._checked(
                (self.binary, *cflags, "-m", "py_compile", str(source_path)),
                f"problem compiling test script {source_path.name}",
            )

    def compile_and_run(self, source: str, cflags: Sequence[str] = ()) -> str:
        with tempfile.TemporaryDirectory(prefix="sysverify-") as workdir:
            source_path = self._write_test_body(Path(workdir), source)
            output = self._checked(
                (self.binary, *cflags, str(source_path)),
                f"problem running test script {source_path.name}",
            )
        return output.strip("\t\n ")


def auto_gcc_binary(candidates: Sequence[str] = TOOLCHAIN_GCC_CANDIDATES) -> str:
    """Return the first installed toolchain gcc, falling back to ``gcc`` on PATH."""
    for candidate in candidates:
        if Path(candidate).exists():
            return candidate
    return "gcc"


def compiler_table(run_command: ProcessRunner | None = None) -> dict[str, CompilerFactory]:
    """Compiler names mapped to constructors; check types are derived from these names."""
    return {
        "gcc-auto": lambda: GccCompiler(auto_gcc_binary(), run_command=run_command),
        "gcc-system": lambda: GccCompiler("gcc", run_command=run_command),
        "toolchain-v2": lambda: GccCompiler(TOOLCHAIN_GCC_CANDIDATES[0], run_command=run_command),
        "toolchain-v1": lambda: GccCompiler(TOOLCHAIN_GCC_CANDIDATES[1], run_command=run_command),
        "toolchain-v0": lambda: GccCompiler(TOOLCHAIN_GCC_CANDIDATES[2], run_command=run_command),
        "go-auto": lambda: GoCompiler("go", run_command=run_command),
        "opt-go-default": lambda: GoCompiler("/opt/go/bin/go", run_command=run_command),
        "toolchain-gccgo-v2": lambda: GoCompiler(
            "/opt/mongodbtoolchain/v2/bin/go", run_command=run_command
        ),
        "python-system": lambda: PythonInterpreter("python3", run_command=run_command),
    }


class CompileCheck(CheckBase):
    """Pass when the test body compiles."""

    def __init__(self, type_name: str, compiler_factory: CompilerFactory) -> None:
        super().__init__(type_name)
        self._compiler_factory = compiler_factory
        self.source = ""
        self.cflags: tuple[str, ...] = ()

    def configure(self, args: Mapping[str, Any]) -> None:
        values = require_args_mapping(args, self._allowed_args())
        self.source = require_string(values, "source")
        self.cflags = string_sequence(values, "cflags")

    def _allowed_args(self) -> tuple[str, ...]:
        return ("source", "cflags")

    def execute(self) -> None:
        compiler = self._compiler_factory()
        try:
            compiler.validate()
            self._probe(compiler)
        except CompilerError as exc:
            self._set_passed(False)
            self._set_message(exc.output or str(exc))
            self._add_error(exc)

    def _probe(self, compiler: Compiler) -> None:
        compiler.compile(self.source, self.cflags)
        self._set_passed(True)


class RunProgramCheck(CompileCheck):
    """Pass when the test body compiles, runs and prints the expected output."""

    def __init__(self, type_name: str, compiler_factory: CompilerFactory) -> None:
        super().__init__(type_name, compiler_factory)
        self.expected_output: str | None = None

    def configure(self, args: Mapping[str, Any]) -> None:
        super().configure(args)
        values = args or {}
        if values.get("output") is None:
            self.expected_output = None
            return
        self.expected_output = optional_string(values, "output").strip("\t\n ")

    def _allowed_args(self) -> tuple[str, ...]:
        return ("source", "cflags", "output")

    def _probe(self, compiler: Compiler) -> None:
        output = compiler.compile_and_run(self.source, self.cflags)
        if self.expected_output is not None and output != self.expected_output:
            self._set_passed(False)
            self._set_message(output)
            self._add_error(
                f"program output '{output}' does not match expected '{self.expected_output}'"
            )
            return
        logger.debug("program for check '%s' printed: %s", self.id, output)
        self._set_passed(True)


def register_compiler_checks(
    registry: CheckRegistry, *, run_command: ProcessRunner | None = None
) -> None:
    """Register ``compile-<compiler>`` and ``run-program-<compiler>`` for every compiler."""
    for compiler_name, factory in compiler_table(run_command).items():
        compile_type = f"compile-{compiler_name}"
        run_type = f"run-program-{compiler_name}"
        registry.register(compile_type, _check_factory(CompileCheck, compile_type, factory))
        registry.register(run_type, _check_factory(RunProgramCheck, run_type, factory))


def _check_factory(check_cls: type[CompileCheck], type_name: str, factory: CompilerFactory):
    def build() -> CompileCheck:
        return check_cls(type_name, factory)

    return build
