"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from csv_converter.application.options import ConversionJob


@dataclass(frozen=True)
class ConversionResult:
    """Structured outcome of one successful conversion."""

    source_path: Path
    destination_path: Path | None
    rows_written: int


@dataclass(frozen=True)
class JobOutcome:
    """Outcome of one dispatched job, success or failure."""

    job: ConversionJob
    worker_id: int
    result: ConversionResult | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def source_path(self) -> Path:
        return self.job.source_path


@dataclass(frozen=True)
class BatchReport:
    """Aggregated outcomes of a batch, in completion order."""

    outcomes: tuple[JobOutcome, ...] = ()

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def by_source(self) -> dict[Path, JobOutcome]:
        """Map each job's source path to its outcome."""
        return {outcome.source_path: outcome for outcome in self.outcomes}
