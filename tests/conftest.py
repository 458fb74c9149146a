"""Shared pytest configuration, marker assignment and workbook fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

type WorkbookFactory = Callable[..., Path]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Drop handlers bound to streams of a finished CLI invocation."""
    yield
    logger = logging.getLogger("csv_converter")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def make_workbook(tmp_path: Path) -> WorkbookFactory:
    """Write an ``.xlsx`` workbook with openpyxl and return its path.

    ``sheets`` maps sheet titles to rows; ``formats`` maps ``(sheet, cell)``
    to a number format; ``active`` is the zero-based active sheet index.
    """
    from openpyxl import Workbook

    def _make(
        name: str,
        sheets: dict[str, Sequence[Sequence[object]]],
        *,
        active: int = 0,
        formats: dict[tuple[str, str], str] | None = None,
        directory: Path | None = None,
    ) -> Path:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for title, rows in sheets.items():
            sheet = workbook.create_sheet(title)
            for row in rows:
                sheet.append(list(row))
        for (title, coordinate), number_format in (formats or {}).items():
            workbook[title][coordinate].number_format = number_format
        workbook.active = active
        path = (directory or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
        return path

    return _make
