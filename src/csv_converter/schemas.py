"""Pydantic schemas for runtime validation of conversion inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FORBIDDEN_DELIMITERS = frozenset({'"', "\r", "\n"})


class ConversionConfigSchema(BaseModel):
    """Validated input for building a ``ConversionConfig``."""

    model_config = ConfigDict(extra="forbid")

    delimiter: str = ";"
    sheet_index: int = -1
    add_bom: bool = False
    raw: bool = False
    allow_scientific: bool = False
    decimal_separator: str | None = None
    thousand_separator: str | None = None
    locale: str = Field(default="en", min_length=1)
    date_fixed_format: str | None = None
    trim: bool = False

    @field_validator("delimiter")
    @classmethod
    def _validate_delimiter(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiter must contain at least one character.")
        # Only the first character is used.
        first = value[0]
        if first in _FORBIDDEN_DELIMITERS:
            raise ValueError("delimiter cannot be a quote or a line break.")
        return first

    @field_validator("sheet_index")
    @classmethod
    def _normalize_sheet_index(cls, value: int) -> int:
        return -1 if value < 0 else value

    @field_validator("decimal_separator", "date_fixed_format")
    @classmethod
    def _empty_as_unset(cls, value: str | None) -> str | None:
        return value or None


class BatchRequestSchema(BaseModel):
    """Validated input for directory batch conversion."""

    model_config = ConfigDict(extra="forbid")

    batch_path: Path
    mask: str = Field(default="*/*.csv", min_length=1)
    worker_count: int = Field(default=1, ge=1)
