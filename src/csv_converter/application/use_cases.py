"""Application use-cases orchestrating conversion workflows."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from csv_converter.application.dispatcher import JobRunner, run_batch
from csv_converter.application.options import (
    ConversionConfig,
    ConversionJob,
    FormattingOptions,
)
from csv_converter.application.pipeline import convert_workbook
from csv_converter.application.ports import ScannerFactory
from csv_converter.application.results import BatchReport, ConversionResult
from csv_converter.discovery import discover
from csv_converter.errors import ConversionError
from csv_converter.paths import resolve_destination
from csv_converter.schemas import BatchRequestSchema, ConversionConfigSchema

logger = logging.getLogger(__name__)


def build_conversion_config(
    *,
    delimiter: str = ";",
    sheet_index: int = -1,
    add_bom: bool = False,
    raw: bool = False,
    allow_scientific: bool = False,
    decimal_separator: str | None = None,
    thousand_separator: str | None = None,
    locale: str = "en",
    date_fixed_format: str | None = None,
    trim: bool = False,
) -> ConversionConfig:
    """Build a validated, immutable config from command/API params."""
    try:
        params = ConversionConfigSchema(
            delimiter=delimiter,
            sheet_index=sheet_index,
            add_bom=add_bom,
            raw=raw,
            allow_scientific=allow_scientific,
            decimal_separator=decimal_separator,
            thousand_separator=thousand_separator,
            locale=locale,
            date_fixed_format=date_fixed_format,
            trim=trim,
        )
    except ValidationError as exc:
        raise ConversionError(f"Invalid conversion parameters: {exc}") from exc

    return ConversionConfig(
        delimiter=params.delimiter,
        sheet_index=params.sheet_index,
        add_bom=params.add_bom,
        formatting=FormattingOptions(
            raw=params.raw,
            allow_scientific=params.allow_scientific,
            decimal_separator=params.decimal_separator,
            thousand_separator=params.thousand_separator,
            locale=params.locale,
            date_fixed_format=params.date_fixed_format,
            trim=params.trim,
        ),
    )


def convert_file(
    *,
    source_path: Path,
    destination_path: Path | None,
    config: ConversionConfig,
    scanner_factory: ScannerFactory | None = None,
) -> ConversionResult:
    """Use-case: convert one workbook synchronously."""
    return convert_workbook(
        source_path,
        destination_path,
        config,
        scanner_factory=scanner_factory,
    )


def plan_jobs(
    sources: Sequence[Path],
    mask: str,
    config: ConversionConfig,
) -> list[ConversionJob]:
    """Pair each source with its destination under ``mask``, keeping order."""
    jobs = [
        ConversionJob(
            source_path=source,
            destination_path=Path(resolve_destination(mask, source)),
            config=config,
        )
        for source in sources
    ]

    by_destination: dict[Path | None, list[Path]] = defaultdict(list)
    for job in jobs:
        by_destination[job.destination_path].append(job.source_path)
    for destination, colliding in by_destination.items():
        if len(colliding) > 1:
            logger.warning(
                "%d sources resolve to %s under mask %r; later writes overwrite earlier ones: %s",
                len(colliding),
                destination,
                mask,
                ", ".join(str(path) for path in colliding),
            )
    return jobs


def convert_directory(
    *,
    batch_path: Path,
    mask: str,
    config: ConversionConfig,
    worker_count: int,
    convert: JobRunner | None = None,
) -> BatchReport:
    """Use-case: convert every workbook in a directory on a worker pool.

    ``worker_count`` must already be resolved (``>= 1``).
    """
    try:
        request = BatchRequestSchema(
            batch_path=batch_path,
            mask=mask,
            worker_count=worker_count,
        )
    except ValidationError as exc:
        raise ConversionError(f"Invalid batch parameters: {exc}") from exc

    files = discover(request.batch_path)
    logger.info(
        "Found %d workbook(s) in %s → %s",
        len(files),
        request.batch_path,
        request.mask,
    )
    jobs = plan_jobs([info.path for info in files], request.mask, config)
    return run_batch(jobs, request.worker_count, convert=convert)
