"""Verbose pass/fail transcript in the style of ``go test -v``."""

from __future__ import annotations

from .report_models import ResultsProducer, format_duration


class TranscriptReport(ResultsProducer):
    """One ``=== RUN`` block per check followed by its PASS or FAIL line."""

    format_name = "gotest"

    def render(self) -> str:
        lines: list[str] = []
        for output in self._outputs:
            verdict = "PASS" if output.passed else "FAIL"
            lines.append(f"=== RUN {output.name}")
            lines.append(f"    message: {output.message}")
            lines.append(f"    error: {output.error}")
            lines.append(
                f"--- {verdict}: {output.name} ({format_duration(output.elapsed_seconds)})"
            )
        overall = "FAIL" if self.failed_count else "PASS"
        lines.append(overall)
        return "\n".join(lines) + "\n"
