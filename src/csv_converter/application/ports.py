"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from csv_converter.application.options import FormattingOptions
from csv_converter.types import RowRecord


class TableScanner(Protocol):
    """Row-at-a-time reader over one workbook."""

    def set_locale(self, tag: str) -> bool:
        """Apply locale; return ``False`` when unsupported and defaulted."""

    def configure(self, options: FormattingOptions) -> None:
        """Configure cell rendering."""

    def select_sheet(self, index: int) -> None:
        """Select sheet by zero-based index; raise ``SheetSelectionError``."""

    def rows(self) -> Iterator[RowRecord]:
        """Yield rendered rows lazily; raise ``ScanError`` on failure."""

    def close(self) -> None:
        """Release the workbook handle."""


class ScannerFactory(Protocol):
    """Open a workbook and return a scanner for it."""

    def __call__(self, source_path: Path) -> TableScanner:
        """Raise ``OpenError`` when the source cannot be parsed."""
