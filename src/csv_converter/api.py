"""Public file-based conversion API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from csv_converter.application.dispatcher import resolve_worker_count
from csv_converter.application.results import BatchReport
from csv_converter.application.use_cases import build_conversion_config
from csv_converter.application.use_cases import convert_directory
from csv_converter.application.use_cases import convert_file


def convert_workbook_to_csv(
    source_path: Path,
    destination_path: Optional[Path] = None,
    sheet_index: int = -1,
    delimiter: str = ";",
    add_bom: bool = False,
    raw: bool = False,
    allow_scientific: bool = False,
    decimal_separator: Optional[str] = None,
    thousand_separator: Optional[str] = None,
    locale: str = "en",
    date_fixed_format: Optional[str] = None,
    trim: bool = False,
) -> int:
    """Convert one workbook to CSV and return the number of rows written."""
    config = build_conversion_config(
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
    result = convert_file(
        source_path=source_path,
        destination_path=destination_path,
        config=config,
    )
    return result.rows_written


def convert_directory_to_csv(
    batch_path: Path,
    mask: str = "*/*.csv",
    worker_count: int = 1,
    sheet_index: int = -1,
    delimiter: str = ";",
    add_bom: bool = False,
    raw: bool = False,
    allow_scientific: bool = False,
    decimal_separator: Optional[str] = None,
    thousand_separator: Optional[str] = None,
    locale: str = "en",
    date_fixed_format: Optional[str] = None,
    trim: bool = False,
) -> BatchReport:
    """Convert every workbook in ``batch_path``; ``worker_count < 1`` means auto."""
    config = build_conversion_config(
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
    return convert_directory(
        batch_path=batch_path,
        mask=mask,
        config=config,
        worker_count=resolve_worker_count(worker_count),
    )
