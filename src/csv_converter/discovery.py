"""Batch input discovery and largest-first ranking."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from csv_converter.errors import AccessError, NotDirectoryError
from csv_converter.types import PathLike

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = frozenset({".xlsx", ".xlsm", ".xls"})


@dataclass(frozen=True)
class FileSortInfo:
    """Discovered workbook path with its size in bytes."""

    path: Path
    size: int


def is_spreadsheet(name: str) -> bool:
    """Return whether a filename has an accepted spreadsheet extension."""
    return os.path.splitext(name)[1].lower() in SPREADSHEET_EXTENSIONS


def rank_by_size(files: Iterable[FileSortInfo]) -> list[FileSortInfo]:
    """Order files by descending size; equal sizes keep encounter order."""
    return sorted(files, key=lambda info: info.size, reverse=True)


def discover(directory: PathLike) -> list[FileSortInfo]:
    """List spreadsheets directly inside ``directory``, largest first.

    Subdirectories are not descended into.

    Parameters
    ----------
    directory : str | os.PathLike
        Batch source directory.

    Returns
    -------
    list[FileSortInfo]
        Accepted workbooks ranked by descending size.

    Raises
    ------
    NotDirectoryError
        If the path exists but is not a directory.
    AccessError
        If the path cannot be stat'ed or listed.
    """
    root = Path(directory)
    try:
        root_stat = root.stat()
    except OSError as exc:
        raise AccessError(f"cannot open batch directory [{root}]: {exc}") from exc
    if not stat.S_ISDIR(root_stat.st_mode):
        raise NotDirectoryError(f"{root} is not a directory")

    found: list[FileSortInfo] = []
    try:
        with os.scandir(root) as entries:
            for entry in entries:
                if entry.is_dir() or not entry.is_file():
                    continue
                if not is_spreadsheet(entry.name):
                    continue
                found.append(
                    FileSortInfo(path=root / entry.name, size=entry.stat().st_size)
                )
    except OSError as exc:
        raise AccessError(f"cannot list batch directory [{root}]: {exc}") from exc

    logger.debug("Discovered %d workbook(s) in %s", len(found), root)
    return rank_by_size(found)
