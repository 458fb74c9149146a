"""Workbook scanners built on openpyxl (xlsx/xlsm) and xlrd (xls)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import timedelta
from pathlib import Path
from typing import Any

from csv_converter.adapters.formatting import CellFormatter, is_elapsed_format
from csv_converter.application.options import FormattingOptions
from csv_converter.application.ports import TableScanner
from csv_converter.errors import (
    ConversionError,
    DependencyError,
    OpenError,
    ScanError,
    SheetSelectionError,
)
from csv_converter.types import CellValue, RowRecord


class _FormattingScanner(ABC):
    """Locale and formatter handling shared by workbook scanners."""

    def __init__(self, source_path: Path) -> None:
        self.source_path = source_path
        self.formatter = CellFormatter()

    def set_locale(self, tag: str) -> bool:
        return self.formatter.set_locale(tag)

    def configure(self, options: FormattingOptions) -> None:
        self.formatter.configure(options)

    def _sheet_out_of_range(self, index: int, count: int) -> SheetSelectionError:
        return SheetSelectionError(
            f"sheet index {index} is out of range: [{self.source_path}] has {count} sheet(s)"
        )

    def __enter__(self) -> _FormattingScanner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def select_sheet(self, index: int) -> None: ...

    @abstractmethod
    def rows(self) -> Iterator[RowRecord]: ...

    @abstractmethod
    def close(self) -> None: ...


class OpenpyxlTableScanner(_FormattingScanner):
    """Stream rows from an ``.xlsx``/``.xlsm`` workbook in read-only mode."""

    def __init__(self, source_path: Path) -> None:
        super().__init__(source_path)
        try:
            import openpyxl
        except Exception as exc:
            raise DependencyError("openpyxl is required to read .xlsx workbooks.") from exc

        try:
            self._workbook = openpyxl.load_workbook(
                str(source_path), read_only=True, data_only=True
            )
        except Exception as exc:
            raise OpenError(f"cannot parse file [{source_path}]: {exc}") from exc
        self._sheet: Any = None

    def select_sheet(self, index: int) -> None:
        sheets = self._workbook.worksheets
        if not 0 <= index < len(sheets):
            raise self._sheet_out_of_range(index, len(sheets))
        self._sheet = sheets[index]

    def _current_sheet(self) -> Any:
        if self._sheet is not None:
            return self._sheet
        active = self._workbook.active
        if active is not None and hasattr(active, "iter_rows"):
            return active
        # Active tab may be a chartsheet.
        if not self._workbook.worksheets:
            raise ScanError(f"[{self.source_path}] has no worksheets")
        return self._workbook.worksheets[0]

    def rows(self) -> Iterator[RowRecord]:
        render = self.formatter.format
        try:
            sheet = self._current_sheet()
            for row in sheet.iter_rows():
                yield [render(cell.value, getattr(cell, "number_format", None)) for cell in row]
        except ConversionError:
            raise
        except Exception as exc:
            raise ScanError(f"cannot scan [{self.source_path}]: {exc}") from exc

    def close(self) -> None:
        self._workbook.close()


class XlrdTableScanner(_FormattingScanner):
    """Read rows from a legacy ``.xls`` workbook, loading sheets on demand."""

    def __init__(self, source_path: Path) -> None:
        super().__init__(source_path)
        try:
            import xlrd
        except Exception as exc:
            raise DependencyError("xlrd is required to read .xls workbooks.") from exc

        self._xlrd = xlrd
        try:
            self._book = xlrd.open_workbook(
                str(source_path), on_demand=True, formatting_info=True
            )
        except Exception as exc:
            raise OpenError(f"cannot parse file [{source_path}]: {exc}") from exc
        self._sheet_index: int | None = None

    def select_sheet(self, index: int) -> None:
        count = self._book.nsheets
        if not 0 <= index < count:
            raise self._sheet_out_of_range(index, count)
        self._sheet_index = index

    def _current_sheet(self) -> Any:
        if self._sheet_index is not None:
            return self._book.sheet_by_index(self._sheet_index)
        if self._book.nsheets == 0:
            raise ScanError(f"[{self.source_path}] has no worksheets")
        for index in range(self._book.nsheets):
            sheet = self._book.sheet_by_index(index)
            if sheet.sheet_visible:
                return sheet
            self._book.unload_sheet(index)
        return self._book.sheet_by_index(0)

    def _number_format(self, cell: Any) -> str | None:
        if cell.xf_index is None:
            return None
        xf = self._book.xf_list[cell.xf_index]
        fmt = self._book.format_map.get(xf.format_key)
        return fmt.format_str if fmt is not None else None

    def _cell_value(self, cell: Any, number_format: str | None) -> CellValue:
        xlrd = self._xlrd
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value, "#ERR")
        if cell.ctype == xlrd.XL_CELL_DATE:
            if is_elapsed_format(number_format):
                return timedelta(days=cell.value)
            try:
                return xlrd.xldate.xldate_as_datetime(cell.value, self._book.datemode)
            except xlrd.xldate.XLDateError:
                return cell.value
        return cell.value

    def rows(self) -> Iterator[RowRecord]:
        render = self.formatter.format
        try:
            sheet = self._current_sheet()
            for rowx in range(sheet.nrows):
                row: RowRecord = []
                for cell in sheet.row(rowx):
                    number_format = self._number_format(cell)
                    row.append(render(self._cell_value(cell, number_format), number_format))
                yield row
        except ConversionError:
            raise
        except Exception as exc:
            raise ScanError(f"cannot scan [{self.source_path}]: {exc}") from exc

    def close(self) -> None:
        self._book.release_resources()


SCANNERS_BY_SUFFIX: dict[str, type[_FormattingScanner]] = {
    ".xlsx": OpenpyxlTableScanner,
    ".xlsm": OpenpyxlTableScanner,
    ".xls": XlrdTableScanner,
}


def open_table_scanner(source_path: Path) -> TableScanner:
    """Open ``source_path`` with the scanner matching its extension.

    Unknown extensions are handed to openpyxl, which rejects what it cannot
    read with ``OpenError``.
    """
    scanner_cls = SCANNERS_BY_SUFFIX.get(Path(source_path).suffix.lower(), OpenpyxlTableScanner)
    return scanner_cls(Path(source_path))
