"""Streaming single-workbook conversion pipeline."""

from __future__ import annotations

import csv
import io
import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import BinaryIO, TextIO

from csv_converter.application.options import ConversionConfig
from csv_converter.application.ports import ScannerFactory
from csv_converter.application.results import ConversionResult
from csv_converter.errors import CreateError, WriteError
from csv_converter.types import RowRecord

logger = logging.getLogger(__name__)

ROW_FLUSH_INTERVAL = 10_000
UTF8_BOM = "\ufeff"
LINE_TERMINATOR = "\n"


@contextmanager
def open_destination(
    destination_path: Path | None,
    stdout: BinaryIO | None = None,
) -> Iterator[TextIO]:
    """Yield a UTF-8 text stream for the destination.

    With no destination path, rows go to ``stdout`` (the process's standard
    output by default), which is flushed but left open.

    Raises
    ------
    CreateError
        If the parent directories or the file cannot be created.
    WriteError
        If the final flush or close of the destination fails.
    """
    if destination_path is None:
        binary = stdout if stdout is not None else sys.stdout.buffer
        stream = io.TextIOWrapper(binary, encoding="utf-8", newline="")
        try:
            yield stream
        finally:
            try:
                stream.flush()
            except OSError as exc:
                raise WriteError(f"cannot write output: {exc}") from exc
            finally:
                stream.detach()
        return

    try:
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        handle = destination_path.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise CreateError(f"cannot create file [{destination_path}]: {exc}") from exc
    try:
        yield handle
    finally:
        # Closing flushes buffered rows, so it can fail like any write.
        try:
            handle.close()
        except OSError as exc:
            raise WriteError(f"cannot write output [{destination_path}]: {exc}") from exc


def write_rows(rows: Iterable[RowRecord], stream: TextIO, config: ConversionConfig) -> int:
    """Write rows one at a time and return how many were written.

    The BOM, when enabled, precedes the first row, or stands alone for a
    sheet without rows. Scan errors raised by ``rows`` propagate unchanged.
    """
    writer = csv.writer(stream, delimiter=config.delimiter, lineterminator=LINE_TERMINATOR)
    bom_pending = config.add_bom
    written = 0
    try:
        for row in rows:
            if bom_pending:
                stream.write(UTF8_BOM)
                bom_pending = False
            writer.writerow(row)
            written += 1
            if written % ROW_FLUSH_INTERVAL == 0:
                stream.flush()
        if bom_pending:
            stream.write(UTF8_BOM)
        stream.flush()
    except OSError as exc:
        raise WriteError(f"cannot write output: {exc}") from exc
    return written


def convert_workbook(
    source_path: Path,
    destination_path: Path | None,
    config: ConversionConfig,
    *,
    scanner_factory: ScannerFactory | None = None,
    stdout: BinaryIO | None = None,
) -> ConversionResult:
    """Convert one workbook sheet into delimited text.

    Parameters
    ----------
    source_path : Path
        Workbook to read.
    destination_path : Path | None
        Output file; ``None`` writes to standard output.
    config : ConversionConfig
        Delimiter, sheet, BOM and formatting settings.
    scanner_factory : ScannerFactory, optional
        Opens the workbook; defaults to the extension-based adapter.
    stdout : BinaryIO, optional
        Binary stream used when ``destination_path`` is ``None``.

    Returns
    -------
    ConversionResult
        Source, destination and number of rows written.

    Raises
    ------
    OpenError, SheetSelectionError, CreateError, ScanError, WriteError
        The first failure; the workbook and output are closed regardless.
    """
    if scanner_factory is None:
        from csv_converter.adapters.scanners import open_table_scanner

        scanner_factory = open_table_scanner

    scanner = scanner_factory(source_path)
    with closing(scanner):
        if not scanner.set_locale(config.formatting.locale):
            logger.debug(
                "Unsupported locale %r for %s, using default",
                config.formatting.locale,
                source_path,
            )
        scanner.configure(config.formatting)
        if not config.uses_current_sheet:
            scanner.select_sheet(config.sheet_index)

        with open_destination(destination_path, stdout) as stream:
            written = write_rows(scanner.rows(), stream, config)

    logger.debug("Converted %s → %s (%d rows)", source_path, destination_path or "<stdout>", written)
    return ConversionResult(
        source_path=source_path,
        destination_path=destination_path,
        rows_written=written,
    )
