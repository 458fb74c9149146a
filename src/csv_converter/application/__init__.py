"""Application-layer use-cases and option objects."""

from __future__ import annotations

from pathlib import Path

from csv_converter.application.options import (
    ConversionConfig,
    ConversionJob,
    FormattingOptions,
)
from csv_converter.application.ports import ScannerFactory, TableScanner
from csv_converter.application.results import (
    BatchReport,
    ConversionResult,
    JobOutcome,
)


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
    """Build a validated config via lazy use-case import."""
    from csv_converter.application.use_cases import build_conversion_config as _impl

    return _impl(
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


def convert_file(
    *,
    source_path: Path,
    destination_path: Path | None,
    config: ConversionConfig,
    scanner_factory: ScannerFactory | None = None,
) -> ConversionResult:
    """Convert one workbook via lazy use-case import."""
    from csv_converter.application.use_cases import convert_file as _impl

    return _impl(
        source_path=source_path,
        destination_path=destination_path,
        config=config,
        scanner_factory=scanner_factory,
    )


def convert_directory(
    *,
    batch_path: Path,
    mask: str,
    config: ConversionConfig,
    worker_count: int,
) -> BatchReport:
    """Convert a directory of workbooks via lazy use-case import."""
    from csv_converter.application.use_cases import convert_directory as _impl

    return _impl(
        batch_path=batch_path,
        mask=mask,
        config=config,
        worker_count=worker_count,
    )


__all__ = [
    "ConversionConfig",
    "ConversionJob",
    "FormattingOptions",
    "TableScanner",
    "ScannerFactory",
    "ConversionResult",
    "JobOutcome",
    "BatchReport",
    "build_conversion_config",
    "convert_file",
    "convert_directory",
]
