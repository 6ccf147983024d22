"""Spreadsheet results renderer."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from .report_models import ReportWriteError, ResultsProducer, format_duration

CHECKS_SHEET_NAME = "Checks"
RUN_INFO_SHEET_NAME = "RunInfo"
CHECK_COLUMNS: tuple[str, ...] = (
    "name",
    "type",
    "suites",
    "status",
    "elapsed_seconds",
    "message",
    "error",
)


class WorkbookReport(ResultsProducer):
    """``.xlsx`` document with one row per check and a RunInfo summary sheet.

    Printing falls back to a plain table since a workbook has no console form.
    """

    format_name = "workbook"

    def render(self) -> str:
        lines = []
        for output in self._outputs:
            status = "PASS" if output.passed else "FAIL"
            lines.append(
                f"{status}\t{output.name}\t{output.check_type}\t"
                f"{format_duration(output.elapsed_seconds)}"
            )
        lines.append(f"{self.total_count - self.failed_count} passed, {self.failed_count} failed")
        return "\n".join(lines) + "\n"

    def build_workbook(self) -> Workbook:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = CHECKS_SHEET_NAME
        for column_index, header in enumerate(CHECK_COLUMNS, start=1):
            sheet.cell(row=1, column=column_index, value=header)

        for row, output in enumerate(self._outputs, start=2):
            values = (
                output.name,
                output.check_type,
                ", ".join(output.suites),
                "pass" if output.passed else "fail",
                round(output.elapsed_seconds, 3),
                output.message,
                output.error,
            )
            for column_index, value in enumerate(values, start=1):
                sheet.cell(row=row, column=column_index, value=value)

        for column_index, header in enumerate(CHECK_COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(column_index)].width = max(
                len(header) + 2, 16
            )

        self._write_run_info_sheet(workbook)
        return workbook

    def to_file(self, path: Path | str) -> None:
        destination = Path(path)
        workbook = self.build_workbook()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(destination)
        except OSError as exc:
            raise ReportWriteError(f"problem writing results to {destination}: {exc}") from exc
        self.raise_for_failures()

    def _write_run_info_sheet(self, workbook: Workbook) -> None:
        sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
        entries = (
            ("generated_at", datetime.now(UTC).isoformat()),
            ("total", self.total_count),
            ("passed", self.total_count - self.failed_count),
            ("failed", self.failed_count),
        )
        for row, (key, value) in enumerate(entries, start=1):
            sheet.cell(row=row, column=1, value=key)
            sheet.cell(row=row, column=2, value=value)
