"""Shell command check tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest
from sysverify.checks import (
    CheckParameterError,
    CommandGroupCheck,
    GroupPolicy,
    ProcessLaunchError,
    ProcessResult,
    ShellOperationCheck,
)
from sysverify.checks.command_checks import SHELL_OPERATION_ERROR


class _FakeRunner:
    def __init__(self, results: Mapping[str, tuple[int, str]] | None = None) -> None:
        self.results = dict(results or {})
        self.calls: list[tuple[tuple[str, ...], object, object]] = []

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        self.calls.append((tuple(args), cwd, env))
        returncode, output = self.results.get(args[-1], (0, ""))
        return ProcessResult(args=tuple(args), returncode=returncode, output=output)


class _FailingLauncher:
    def __call__(self, args, *, cwd=None, env=None) -> ProcessResult:
        raise ProcessLaunchError("could not execute 'sh': no such file")


def _shell(command: str, runner, **extra) -> ShellOperationCheck:
    check = ShellOperationCheck(run_command=runner)
    check.configure({"command": command, **extra})
    check.set_id("shell")
    return check


def test_zero_exit_passes_and_runs_through_sh() -> None:
    runner = _FakeRunner()
    check = _shell("uptime", runner)

    check.run()

    assert check.output().passed is True
    assert runner.calls == [(("sh", "-c", "uptime"), None, None)]


def test_non_zero_exit_fails_with_output_as_message() -> None:
    runner = _FakeRunner({"false": (3, "boom\n")})
    check = _shell("false", runner)

    check.run()
    output = check.output()

    assert output.passed is False
    assert output.message == "boom\n"
    assert "exit code 3" in output.error


def test_error_variant_passes_when_command_fails() -> None:
    runner = _FakeRunner({"false": (1, "")})
    check = ShellOperationCheck(SHELL_OPERATION_ERROR, should_fail=True, run_command=runner)
    check.configure({"command": "false"})

    check.run()

    assert check.output().passed is True


def test_error_variant_fails_when_command_succeeds() -> None:
    check = ShellOperationCheck(SHELL_OPERATION_ERROR, should_fail=True, run_command=_FakeRunner())
    check.configure({"command": "true"})

    check.run()

    assert check.output().passed is False
    assert "expected to fail" in check.output().error


def test_environment_is_merged_over_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("SYSVERIFY_INHERITED", "yes")
    runner = _FakeRunner()
    check = _shell("env", runner, environment={"EXTRA": "1"}, working_directory="/tmp")

    check.run()

    _, cwd, env = runner.calls[0]
    assert cwd == "/tmp"
    assert env["EXTRA"] == "1"
    assert env["SYSVERIFY_INHERITED"] == "yes"


def test_launch_failure_fails_the_check() -> None:
    check = _shell("true", _FailingLauncher())

    check.run()
    output = check.output()

    assert output.passed is False
    assert output.message.startswith("could not execute command")
    assert "no such file" in output.error


def test_configure_rejects_missing_and_unknown_args() -> None:
    with pytest.raises(CheckParameterError, match="command must be a string"):
        ShellOperationCheck().configure({})
    with pytest.raises(CheckParameterError, match="unsupported check args: shell"):
        ShellOperationCheck().configure({"command": "true", "shell": "bash"})


def test_real_shell_receives_environment_and_working_directory(tmp_path: Path) -> None:
    (tmp_path / "marker").write_text("", encoding="utf-8")
    check = ShellOperationCheck()
    check.configure(
        {
            "command": 'test -f marker && test "$SYSVERIFY_MARKER" = expected',
            "working_directory": str(tmp_path),
            "environment": {"SYSVERIFY_MARKER": "expected"},
        }
    )

    check.run()

    assert check.output().passed is True


def test_undecodable_output_does_not_change_the_verdict() -> None:
    check = ShellOperationCheck()
    check.configure({"command": "printf '\\377\\376 done'; exit 0"})

    check.run()

    assert check.output().passed is True
    assert check.output().error == ""


def test_undecodable_output_of_a_failing_command_is_kept_as_message() -> None:
    check = ShellOperationCheck()
    check.configure({"command": "printf 'bad \\377'; exit 4"})

    check.run()

    output = check.output()
    assert output.passed is False
    assert output.message == "bad \ufffd"
    assert "exit code 4" in output.error
    assert "codec" not in output.error


def test_command_group_applies_policy_to_children() -> None:
    runner = _FakeRunner({"false": (1, "nope")})
    group = CommandGroupCheck("all-commands", GroupPolicy.from_name("all"), run_command=runner)
    group.configure({"commands": [{"command": "true"}, {"command": "false"}]})
    group.set_id("commands")

    group.run()
    output = group.output()

    assert output.passed is False
    assert output.message == "nope"
    assert [call[0][-1] for call in runner.calls] == ["true", "false"]


def test_command_group_rejects_non_mapping_entries() -> None:
    group = CommandGroupCheck("any-command", GroupPolicy.from_name("any"))

    with pytest.raises(CheckParameterError, match="entries must be mappings"):
        group.configure({"commands": ["true"]})
