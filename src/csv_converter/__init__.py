"""Top-level API for spreadsheet-to-CSV conversion."""

from __future__ import annotations

from pathlib import Path

from csv_converter.application.results import BatchReport

__version__ = "0.1.0"


def convert_workbook_to_csv(
    source_path: Path,
    destination_path: Path | None = None,
    *,
    sheet_index: int = -1,
    delimiter: str = ";",
    add_bom: bool = False,
    **formatting: object,
) -> int:
    """Convert one workbook to delimited text.

    Parameters
    ----------
    source_path : Path
        ``.xlsx``, ``.xlsm`` or ``.xls`` workbook.
    destination_path : Path | None, default=None
        Output file; standard output when omitted.
    sheet_index : int, default=-1
        Zero-based sheet index; negative selects the active sheet.
    delimiter : str, default=";"
        Field delimiter (first character is used).
    add_bom : bool, default=False
        Start the output with a UTF-8 byte-order mark.
    **formatting : object
        ``raw``, ``allow_scientific``, ``decimal_separator``,
        ``thousand_separator``, ``locale``, ``date_fixed_format``, ``trim``.

    Returns
    -------
    int
        Number of rows written.
    """
    from .api import convert_workbook_to_csv as _impl

    return _impl(
        source_path=Path(source_path),
        destination_path=Path(destination_path) if destination_path else None,
        sheet_index=sheet_index,
        delimiter=delimiter,
        add_bom=add_bom,
        **formatting,
    )


def convert_directory_to_csv(
    batch_path: Path,
    mask: str = "*/*.csv",
    *,
    worker_count: int = 1,
    **options: object,
) -> BatchReport:
    """Convert every workbook directly inside ``batch_path``.

    Parameters
    ----------
    batch_path : Path
        Directory to scan (not recursive).
    mask : str, default="*/*.csv"
        Destination template; ``*/`` is the source directory and ``*`` the
        source basename without extension.
    worker_count : int, default=1
        Worker threads; values below one select the core count plus one.
    **options : object
        Same conversion options as :func:`convert_workbook_to_csv`.

    Returns
    -------
    BatchReport
        One outcome per discovered workbook.
    """
    from .api import convert_directory_to_csv as _impl

    return _impl(
        batch_path=Path(batch_path),
        mask=mask,
        worker_count=worker_count,
        **options,
    )


__all__ = [
    "convert_workbook_to_csv",
    "convert_directory_to_csv",
]
