"""Shared type aliases for converter modules."""

from __future__ import annotations

import os
from datetime import date, datetime, time, timedelta

type RowRecord = list[str]
type PathLike = str | os.PathLike[str]
type CellValue = str | int | float | bool | datetime | date | time | timedelta | None
