"""Compiler toolchain check tests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest
from sysverify.checks import (
    CheckParameterError,
    CompileCheck,
    CompilerError,
    ProcessResult,
    RunProgramCheck,
    build_default_registry,
)
from sysverify.checks.compiler_checks import (
    GccCompiler,
    PythonInterpreter,
    auto_gcc_binary,
    validate_binary,
)


class _FakeCompiler:
    def __init__(
        self,
        *,
        program_output: str = "",
        invalid: str | None = None,
        broken: CompilerError | None = None,
    ) -> None:
        self.binary = "fake-cc"
        self.program_output = program_output
        self.invalid = invalid
        self.broken = broken
        self.compiled: list[tuple[str, tuple[str, ...]]] = []

    def validate(self) -> None:
        if self.invalid:
            raise CompilerError(self.invalid)

    def compile(self, source: str, cflags: Sequence[str] = ()) -> None:
        self.compiled.append((source, tuple(cflags)))
        if self.broken is not None:
            raise self.broken

    def compile_and_run(self, source: str, cflags: Sequence[str] = ()) -> str:
        self.compile(source, cflags)
        return self.program_output


class _ScriptedRunner:
    def __init__(self, *results: tuple[int, str]) -> None:
        self.results = list(results)
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: Sequence[str], *, cwd=None, env=None) -> ProcessResult:
        self.calls.append(tuple(args))
        returncode, output = self.results.pop(0)
        return ProcessResult(args=tuple(args), returncode=returncode, output=output)


def test_compile_check_passes_and_forwards_cflags() -> None:
    compiler = _FakeCompiler()
    check = CompileCheck("compile-fake", lambda: compiler)
    check.configure({"source": "int main(void) { return 0; }", "cflags": ["-O2"]})

    check.run()

    assert check.output().passed is True
    assert compiler.compiled == [("int main(void) { return 0; }", ("-O2",))]


def test_invalid_compiler_fails_without_compiling() -> None:
    compiler = _FakeCompiler(invalid="compiler binary '/opt/cc' does not exist")
    check = CompileCheck("compile-fake", lambda: compiler)
    check.configure({"source": "int main;"})

    check.run()

    assert check.output().passed is False
    assert "does not exist" in check.output().error
    assert compiler.compiled == []


def test_compile_failure_uses_compiler_output_as_message() -> None:
    compiler = _FakeCompiler(broken=CompilerError("problem compiling", output="syntax error"))
    check = CompileCheck("compile-fake", lambda: compiler)
    check.configure({"source": "int main("})

    check.run()

    assert check.output().passed is False
    assert check.output().message == "syntax error"
    assert check.output().error == "problem compiling"


@pytest.mark.parametrize(
    ("expected", "actual", "passed"),
    [
        ("hello", "hello", True),
        ("  hello\n", "hello", True),
        ("hello", "goodbye", False),
        (None, "anything", True),
    ],
)
def test_run_program_compares_trimmed_output(
    expected: str | None, actual: str, passed: bool
) -> None:
    check = RunProgramCheck("run-program-fake", lambda: _FakeCompiler(program_output=actual))
    args = {"source": "main"}
    if expected is not None:
        args["output"] = expected
    check.configure(args)

    check.run()

    assert check.output().passed is passed
    if not passed:
        assert "does not match expected" in check.output().error


def test_compile_check_requires_source() -> None:
    check = CompileCheck("compile-fake", _FakeCompiler)

    with pytest.raises(CheckParameterError, match="source must be a string"):
        check.configure({"cflags": []})


def test_gcc_compile_and_run_invokes_compiler_then_program() -> None:
    runner = _ScriptedRunner((0, ""), (0, "42\n"))
    compiler = GccCompiler("gcc", run_command=runner)

    output = compiler.compile_and_run("int main(void) { return 0; }", ["-lm"])

    assert output == "42"
    compile_call, program_call = runner.calls
    assert compile_call[:2] == ("gcc", "-Werror")
    assert compile_call[-1] == "-lm"
    assert program_call == (compile_call[3],)


def test_gcc_compile_failure_carries_output() -> None:
    compiler = GccCompiler("gcc", run_command=_ScriptedRunner((1, "error: expected ';'")))

    with pytest.raises(CompilerError, match="problem compiling test body") as excinfo:
        compiler.compile("int main(")

    assert excinfo.value.output == "error: expected ';'"


def test_python_interpreter_runs_script() -> None:
    runner = _ScriptedRunner((0, "ok\n"))

    output = PythonInterpreter("python3", run_command=runner).compile_and_run("print('ok')")

    assert output == "ok"
    assert runner.calls[0][0] == "python3"
    assert runner.calls[0][-1].endswith("check_body.py")


def test_validate_binary(tmp_path: Path) -> None:
    existing = tmp_path / "cc"
    existing.write_text("", encoding="utf-8")

    validate_binary(str(existing), "compiler")
    with pytest.raises(CompilerError, match="does not exist"):
        validate_binary(str(tmp_path / "missing-cc"), "compiler")
    with pytest.raises(CompilerError, match="not found on PATH"):
        validate_binary("sysverify-no-such-compiler", "compiler")
    with pytest.raises(CompilerError, match="no compiler specified"):
        validate_binary("", "compiler")


def test_auto_gcc_prefers_first_existing_toolchain(tmp_path: Path) -> None:
    existing = tmp_path / "gcc"
    existing.write_text("", encoding="utf-8")

    assert auto_gcc_binary((str(tmp_path / "missing"), str(existing))) == str(existing)
    assert auto_gcc_binary((str(tmp_path / "missing"),)) == "gcc"


def test_registered_compiler_types_build_checks() -> None:
    registry = build_default_registry()

    compile_check = registry.construct("compile-gcc-system")
    run_check = registry.construct("run-program-go-auto")

    assert isinstance(compile_check, CompileCheck)
    assert isinstance(run_check, RunProgramCheck)
    assert run_check.type_name == "run-program-go-auto"
