"""Output options and the single entry point that produces run results."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from sysverify.configuration import DEFAULT_REPORT_FORMAT

from .report_models import ChecksFailedError, ResultsProducer
from .report_registry import get_results_factory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputOptions:
    """Where and how results are rendered."""

    output_path: Path | None = None
    report_format: str = DEFAULT_REPORT_FORMAT
    quiet: bool = False

    def __post_init__(self) -> None:
        get_results_factory(self.report_format)
        if self.output_path is not None and not isinstance(self.output_path, Path):
            object.__setattr__(self, "output_path", Path(self.output_path))

    def producer(self) -> ResultsProducer:
        return get_results_factory(self.report_format)()

    def produce_results(self, checks: Iterable[object]) -> ResultsProducer:
        """Render ``checks`` to the console and/or file, raising once if any check failed."""
        producer = self.producer()
        producer.populate(checks)

        if not self.quiet:
            try:
                producer.print_results()
            except ChecksFailedError:
                pass
        if self.output_path is not None:
            try:
                producer.to_file(self.output_path)
            except ChecksFailedError:
                pass

        if producer.failed_count:
            logger.debug("%d of %d checks failed", producer.failed_count, producer.total_count)
            raise ChecksFailedError(producer.failed_count, producer.total_count)
        return producer
