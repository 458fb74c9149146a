#!/usr/bin/env python3
"""
csv_converter.cli.cli

Typer-based CLI for converting spreadsheet workbooks to delimited text.

Single file mode writes one workbook sheet to a CSV file, or to stdout when
``--csv`` is omitted. Batch mode converts every ``.xlsx``/``.xlsm``/``.xls``
file directly inside a directory on a pool of worker threads.

Examples
--------
Single file to stdout:

    convert-to-csv --xlsx report.xlsx

Batch with four workers, outputs next to a ``converted`` folder:

    convert-to-csv --batch ./inbox --batchMask "*/converted/*.csv" --batchThreads 4
"""

from __future__ import annotations

import traceback
from pathlib import Path

import typer

from csv_converter.errors import ConversionError
from csv_converter.logging_utils import setup_logging

app = typer.Typer(
    name="convert-to-csv",
    help="Convert XLSX/XLS workbooks to CSV, one file or a whole folder.",
    add_completion=False,
)

XLSX_ONLY = "[XLSX only] "


def _print_conversion_error(exc: Exception, debug: bool) -> None:
    """Print a user-friendly conversion error.

    Parameters
    ----------
    exc : Exception
        Exception raised during conversion.
    debug : bool
        Whether to include traceback details.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)


def _build_config(**params: object):
    from csv_converter.application.use_cases import build_conversion_config

    try:
        return build_conversion_config(**params)
    except ConversionError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _run_single(xlsx: Path, csv_path: Path | None, params: dict[str, object], debug: bool) -> None:
    config = _build_config(**params)
    try:
        from csv_converter.application.use_cases import convert_file

        convert_file(source_path=xlsx, destination_path=csv_path, config=config)
    except ConversionError as exc:
        _print_conversion_error(exc, debug)
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        _print_conversion_error(exc, debug)


def _run_batch(
    batch: Path,
    batch_mask: str,
    batch_threads: int,
    params: dict[str, object],
    debug: bool,
) -> None:
    from csv_converter.application.dispatcher import resolve_worker_count
    from csv_converter.application.use_cases import convert_directory

    config = _build_config(**params)
    try:
        report = convert_directory(
            batch_path=batch,
            mask=batch_mask,
            config=config,
            worker_count=resolve_worker_count(batch_threads),
        )
    except ConversionError as exc:
        _print_conversion_error(exc, debug)
        return
    if report.failed:
        typer.echo(f"{report.failed} of {report.total} workbook(s) failed", err=True)


@app.command()
def main(
    ctx: typer.Context,
    xlsx: Path | None = typer.Option(
        None, "--xlsx", help="[single file mode] Path to input XLSX/XLS file."
    ),
    csv_path: Path | None = typer.Option(
        None, "--csv", help="[single file mode] Path to output CSV file (stdout if empty)."
    ),
    batch: Path | None = typer.Option(
        None,
        "--batch",
        help="[batch mode] Folder to convert; every .xlsx/.xls file becomes a CSV.",
    ),
    batch_mask: str = typer.Option(
        "*/*.csv",
        "--batchMask",
        help="[batch mode] Output path mask, e.g. '*/converted/raw-*-out.csv'.",
    ),
    batch_threads: int = typer.Option(
        1,
        "--batchThreads",
        help="[batch mode] Number of workers, 0 for auto (CPU count + 1).",
    ),
    sheet: int = typer.Option(
        -1, "--sheet", help="Zero-based sheet index, -1 for the active sheet."
    ),
    delimiter: str = typer.Option(";", "--delimiter", help="CSV delimiter."),
    fmt_raw: bool = typer.Option(
        False, "--fmtRaw", help=XLSX_ONLY + "Use cell values instead of formatted text."
    ),
    fmt_i18n: str = typer.Option(
        "en", "--fmtI18n", help=XLSX_ONLY + "Locale for built-in number formats."
    ),
    fmt_allow_exp: bool = typer.Option(
        False,
        "--fmtAllowExp",
        help=XLSX_ONLY + "Keep scientific formats (4.61E+12) instead of plain digits.",
    ),
    fmt_decimal: str = typer.Option(
        "", "--fmtDecimal", help=XLSX_ONLY + "Decimal separator for number formats."
    ),
    fmt_thousand: str | None = typer.Option(
        None,
        "--fmtThousand",
        help=XLSX_ONLY + "Thousand separator for number formats (default depends on locale).",
    ),
    fmt_date_fixed: str = typer.Option(
        "", "--fmtDateFixed", help=XLSX_ONLY + "Date format for every date cell, e.g. yyyy-mm-dd."
    ),
    bom: bool = typer.Option(
        False, "--bom", help="Start every output with the UTF-8 BOM (EF BB BF)."
    ),
    trim: bool = typer.Option(False, "--trim", help="Trim whitespace around cell values."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Convert one workbook (--xlsx) or a folder of workbooks (--batch) to CSV.

    Notes
    -----
    - ``--xlsx`` takes precedence over ``--batch``.
    - Conversion errors are reported on stderr; they do not change the exit code.
    """
    setup_logging(verbose)
    params: dict[str, object] = {
        "delimiter": delimiter,
        "sheet_index": sheet,
        "add_bom": bom,
        "raw": fmt_raw,
        "allow_scientific": fmt_allow_exp,
        "decimal_separator": fmt_decimal or None,
        "thousand_separator": fmt_thousand,
        "locale": fmt_i18n,
        "date_fixed_format": fmt_date_fixed or None,
        "trim": trim,
    }

    if xlsx is not None:
        _run_single(xlsx, csv_path, params, debug)
    elif batch is not None:
        _run_batch(batch, batch_mask, batch_threads, params, debug)
    else:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
