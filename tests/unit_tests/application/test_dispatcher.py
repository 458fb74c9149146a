"""Unit tests for the batch worker pool."""

from __future__ import annotations

import threading
from collections import Counter
from pathlib import Path

import pytest

from csv_converter.application.dispatcher import resolve_worker_count, run_batch
from csv_converter.application.options import ConversionConfig, ConversionJob
from csv_converter.application.results import BatchReport, ConversionResult
from csv_converter.errors import OpenError


def _jobs(count: int) -> list[ConversionJob]:
    config = ConversionConfig()
    return [
        ConversionJob(
            source_path=Path(f"/in/book{i}.xlsx"),
            destination_path=Path(f"/out/book{i}.csv"),
            config=config,
        )
        for i in range(count)
    ]


def _live_workers() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name.startswith("csv-worker-")]


class _Recorder:
    def __init__(self) -> None:
        self.calls: Counter[Path] = Counter()
        self._lock = threading.Lock()

    def __call__(self, job: ConversionJob) -> ConversionResult:
        with self._lock:
            self.calls[job.source_path] += 1
        return ConversionResult(
            source_path=job.source_path,
            destination_path=job.destination_path,
            rows_written=1,
        )


@pytest.mark.parametrize("worker_count", [1, 2, 3, 12])
def test_every_job_runs_exactly_once(worker_count: int) -> None:
    """Ensure each job produces one outcome whatever the pool size."""
    jobs = _jobs(7)
    recorder = _Recorder()

    report = run_batch(jobs, worker_count, convert=recorder)

    assert report.total == 7
    assert report.succeeded == 7
    assert set(report.by_source()) == {job.source_path for job in jobs}
    assert all(count == 1 for count in recorder.calls.values())
    assert len(recorder.calls) == 7
    assert {o.worker_id for o in report.outcomes} <= set(range(worker_count))


def test_workers_have_exited_when_batch_returns() -> None:
    run_batch(_jobs(4), 3, convert=_Recorder())

    assert _live_workers() == []


def test_failure_is_isolated_to_its_job() -> None:
    """Ensure one failing workbook does not stop the others."""
    jobs = _jobs(5)
    broken = jobs[2].source_path
    recorder = _Recorder()

    def _convert(job: ConversionJob) -> ConversionResult:
        if job.source_path == broken:
            raise OpenError(f"cannot parse file [{broken}]")
        return recorder(job)

    report = run_batch(jobs, 2, convert=_convert)

    assert report.total == 5
    assert report.failed == 1
    assert report.succeeded == 4
    failed = report.by_source()[broken]
    assert not failed.ok
    assert isinstance(failed.error, OpenError)
    assert failed.result is None


def test_unexpected_exception_is_recorded() -> None:
    def _convert(job: ConversionJob) -> ConversionResult:
        raise RuntimeError("boom")

    report = run_batch(_jobs(3), 2, convert=_convert)

    assert report.failed == 3
    assert all(isinstance(o.error, RuntimeError) for o in report.outcomes)
    assert _live_workers() == []


def test_two_workers_run_jobs_concurrently() -> None:
    """Ensure two workers hold two jobs at the same time."""
    barrier = threading.Barrier(2, timeout=10)
    recorder = _Recorder()

    def _convert(job: ConversionJob) -> ConversionResult:
        barrier.wait()
        return recorder(job)

    report = run_batch(_jobs(2), 2, convert=_convert)

    assert report.succeeded == 2
    assert len({o.worker_id for o in report.outcomes}) == 2


def test_single_worker_preserves_dispatch_order() -> None:
    jobs = _jobs(5)
    seen: list[Path] = []

    def _convert(job: ConversionJob) -> ConversionResult:
        seen.append(job.source_path)
        return ConversionResult(job.source_path, job.destination_path, 0)

    run_batch(jobs, 1, convert=_convert)

    assert seen == [job.source_path for job in jobs]


def test_empty_batch_returns_empty_report() -> None:
    report = run_batch([], 4, convert=_Recorder())

    assert report.total == 0
    assert _live_workers() == []


@pytest.mark.parametrize("worker_count", [0, -3])
def test_run_batch_rejects_non_positive_worker_count(worker_count: int) -> None:
    with pytest.raises(ValueError, match="worker_count"):
        run_batch(_jobs(1), worker_count, convert=_Recorder())


def test_resolve_worker_count_keeps_explicit_value() -> None:
    assert resolve_worker_count(3) == 3


@pytest.mark.parametrize("requested", [0, -1])
def test_resolve_worker_count_auto(monkeypatch: pytest.MonkeyPatch, requested: int) -> None:
    """Ensure auto mode uses the core count plus one."""
    monkeypatch.setattr("os.cpu_count", lambda: 4)

    assert resolve_worker_count(requested) == 5


def test_resolve_worker_count_unknown_cpu_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("os.cpu_count", lambda: None)

    assert resolve_worker_count(0) == 2


def test_system_exit_in_a_job_still_reports_outcome() -> None:
    """Ensure a job raising SystemExit cannot leave the batch waiting forever."""
    jobs = _jobs(3)
    exiting = jobs[1].source_path
    recorder = _Recorder()
    reports: list[BatchReport] = []

    def _convert(job: ConversionJob) -> ConversionResult:
        if job.source_path == exiting:
            raise SystemExit(3)
        return recorder(job)

    runner = threading.Thread(
        target=lambda: reports.append(run_batch(jobs, 1, convert=_convert)),
        daemon=True,
    )
    runner.start()
    runner.join(timeout=10)

    assert not runner.is_alive()
    (report,) = reports
    assert report.total == 3
    assert report.succeeded == 2
    assert isinstance(report.by_source()[exiting].error, SystemExit)
    assert _live_workers() == []
