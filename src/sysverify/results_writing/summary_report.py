"""Machine-readable JSON results document."""

from __future__ import annotations

import json
from typing import Any

from sysverify.checks import CheckOutput

from .report_models import ResultsProducer


class SummaryReport(ResultsProducer):
    """``{"results": [...]}`` document with one item per check."""

    format_name = "result"

    def document(self) -> dict[str, Any]:
        return {
            "results": [_result_item(output) for output in self._outputs],
            "summary": {
                "total": self.total_count,
                "passed": self.total_count - self.failed_count,
                "failed": self.failed_count,
            },
        }

    def render(self) -> str:
        return json.dumps(self.document(), indent=2) + "\n"


def _result_item(output: CheckOutput) -> dict[str, Any]:
    return {
        "status": "pass" if output.passed else "fail",
        "test_file": output.name,
        "check": output.check_type,
        "suites": list(output.suites),
        "exit_code": 0 if output.passed else 1,
        "elapsed": output.elapsed_seconds,
        "start": output.started_at.isoformat() if output.started_at else None,
        "end": output.finished_at.isoformat() if output.finished_at else None,
        "message": output.message,
        "error": output.error,
    }
