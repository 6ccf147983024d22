"""Output options tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from sysverify.checks import CheckBase
from sysverify.results_writing import ChecksFailedError, OutputOptions, ReportError


class _FinishedCheck(CheckBase):
    def __init__(self, name: str, passed: bool) -> None:
        super().__init__("flag")
        self.set_id(name)
        self.outcome = passed
        self.run()

    def configure(self, args) -> None:
        return None

    def execute(self) -> None:
        self._set_passed(self.outcome)


def test_unknown_format_is_rejected_at_construction() -> None:
    with pytest.raises(ReportError):
        OutputOptions(report_format="xml")


def test_quiet_run_writes_file_and_raises_one_aggregate_error(tmp_path: Path, capsys) -> None:
    output_path = tmp_path / "results.json"
    options = OutputOptions(output_path=output_path, report_format="result", quiet=True)

    with pytest.raises(ChecksFailedError, match="2 checks failed") as excinfo:
        options.produce_results(
            [_FinishedCheck("a", True), _FinishedCheck("b", False), _FinishedCheck("c", False)]
        )

    assert capsys.readouterr().out == ""
    assert excinfo.value.total_count == 3
    assert len(json.loads(output_path.read_text(encoding="utf-8"))["results"]) == 3


def test_passing_run_prints_and_returns_producer(capsys) -> None:
    producer = OutputOptions().produce_results([_FinishedCheck("a", True)])

    assert producer.total_count == 1
    assert producer.failed_count == 0
    assert "--- PASS: a" in capsys.readouterr().out


def test_string_output_path_is_normalized() -> None:
    options = OutputOptions(output_path="results.txt")  # type: ignore[arg-type]

    assert options.output_path == Path("results.txt")
