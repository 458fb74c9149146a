"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

CURRENT_SHEET = -1
DEFAULT_DELIMITER = ";"
DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class FormattingOptions:
    """Cell rendering configuration applied by the scanner's formatter.

    ``None`` separators mean "use the locale's separator".
    """

    raw: bool = False
    allow_scientific: bool = False
    decimal_separator: str | None = None
    thousand_separator: str | None = None
    locale: str = DEFAULT_LOCALE
    date_fixed_format: str | None = None
    trim: bool = False


@dataclass(frozen=True)
class ConversionConfig:
    """Immutable per-conversion configuration."""

    delimiter: str = DEFAULT_DELIMITER
    sheet_index: int = CURRENT_SHEET
    add_bom: bool = False
    formatting: FormattingOptions = FormattingOptions()

    @property
    def uses_current_sheet(self) -> bool:
        return self.sheet_index < 0


@dataclass(frozen=True)
class ConversionJob:
    """One source-to-destination conversion unit.

    A ``None`` destination means standard output.
    """

    source_path: Path
    destination_path: Path | None
    config: ConversionConfig
