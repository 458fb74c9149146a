"""Bounded worker pool dispatching conversion jobs."""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable, Sequence

from csv_converter.application.options import ConversionJob
from csv_converter.application.pipeline import convert_workbook
from csv_converter.application.results import BatchReport, ConversionResult, JobOutcome

logger = logging.getLogger(__name__)

type JobRunner = Callable[[ConversionJob], ConversionResult]

_STOP = object()


def resolve_worker_count(requested: int) -> int:
    """Map an "auto" request (``< 1``) to the core count plus one."""
    if requested >= 1:
        return requested
    return (os.cpu_count() or 1) + 1


def run_job(job: ConversionJob) -> ConversionResult:
    """Run the conversion pipeline for one job."""
    return convert_workbook(job.source_path, job.destination_path, job.config)


def _worker(
    worker_id: int,
    tasks: queue.Queue[object],
    outcomes: queue.Queue[JobOutcome],
    convert: JobRunner,
) -> None:
    try:
        while True:
            job = tasks.get()
            if job is _STOP:
                return
            logger.info("START[%d] %s", worker_id, job.source_path)
            try:
                result = convert(job)
            except BaseException as exc:
                # Every dequeued job reports an outcome, SystemExit included;
                # the worker keeps pulling jobs.
                logger.error("  ERR[%d] %s: %s", worker_id, job.source_path, exc)
                outcome = JobOutcome(job=job, worker_id=worker_id, error=exc)
            else:
                outcome = JobOutcome(job=job, worker_id=worker_id, result=result)
            logger.info("END  [%d] %s", worker_id, job.destination_path or "<stdout>")
            outcomes.put(outcome)
    finally:
        logger.info("STOP [%d]", worker_id)


def run_batch(
    jobs: Sequence[ConversionJob],
    worker_count: int,
    *,
    convert: JobRunner | None = None,
) -> BatchReport:
    """Run every job exactly once on a fixed pool of worker threads.

    Jobs are queued up front in order, the queue is then closed with one
    stop marker per worker, and the call returns only after one outcome per
    job has arrived and every worker thread has exited.

    Parameters
    ----------
    jobs : Sequence[ConversionJob]
        Jobs in dispatch order.
    worker_count : int
        Number of worker threads, at least one.
    convert : callable, optional
        Job runner; defaults to the conversion pipeline.

    Returns
    -------
    BatchReport
        One outcome per job, in completion order.

    Raises
    ------
    ValueError
        If ``worker_count`` is below one.
    """
    if worker_count < 1:
        raise ValueError("worker_count must be >= 1")
    convert = convert or run_job

    tasks: queue.Queue[object] = queue.Queue(maxsize=len(jobs) + worker_count)
    outcomes: queue.Queue[JobOutcome] = queue.Queue(maxsize=len(jobs) or 1)

    workers = [
        threading.Thread(
            target=_worker,
            args=(worker_id, tasks, outcomes, convert),
            name=f"csv-worker-{worker_id}",
        )
        for worker_id in range(worker_count)
    ]
    for thread in workers:
        thread.start()

    for job in jobs:
        tasks.put_nowait(job)
    for _ in workers:
        tasks.put_nowait(_STOP)

    collected = [outcomes.get() for _ in jobs]
    for thread in workers:
        thread.join()

    report = BatchReport(outcomes=tuple(collected))
    logger.info(
        "Batch summary | total=%d ok=%d failed=%d workers=%d",
        report.total,
        report.succeeded,
        report.failed,
        worker_count,
    )
    return report
