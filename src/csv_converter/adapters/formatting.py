"""Cell value rendering for scanned workbook rows."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from csv_converter.application.options import DEFAULT_LOCALE, FormattingOptions
from csv_converter.types import CellValue

# (decimal separator, thousand separator)
LOCALE_SEPARATORS: dict[str, tuple[str, str]] = {
    "en": (".", ","),
    "de": (",", "."),
    "es": (",", "."),
    "fr": (",", " "),
    "it": (",", "."),
    "nl": (",", "."),
    "pl": (",", " "),
    "pt": (",", "."),
    "ru": (",", " "),
    "uk": (",", " "),
}

GENERAL_FORMAT = "General"
_EXCEL_EPOCH = date(1899, 12, 30)
# Serials below 60 count from 1899-12-31 (Excel treats 1900 as a leap year).
_LEAP_BUG_CUTOFF = datetime(1900, 3, 1)
_PLACEHOLDERS = "0#?"

_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_CURRENCY_BRACKET = re.compile(r"\[\$([^\]-]*)[^\]]*\]")
_DATE_TOKEN = re.compile(
    r'"[^"]*"|\\.|\[[^\]]*\]|AM/PM|A/P|yyyy|yy|mmmmm|mmmm|mmm|mm|m'
    r"|dddd|ddd|dd|d|hh|h|ss|s|\.0+|.",
    re.IGNORECASE,
)
_DATE_LETTERS = re.compile(r"[ydhs]", re.IGNORECASE)
_ELAPSED_TOKEN = re.compile(r"\[(h+|m+|s+)\]", re.IGNORECASE)


def normalize_locale(tag: str) -> str:
    """Reduce a locale tag such as ``de_DE`` or ``pt-BR`` to its language."""
    return tag.strip().lower().replace("_", "-").split("-", 1)[0]


def plain_number(value: int | float) -> str:
    """Render a number without exponent notation or grouping."""
    if isinstance(value, int):
        return str(value)
    if math.isnan(value) or math.isinf(value):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _split_sections(number_format: str) -> list[str]:
    sections: list[str] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for char in number_format:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == ";" and not quoted:
            sections.append("".join(current))
            current = []
            continue
        current.append(char)
    sections.append("".join(current))
    return sections


def _tokenize_section(section: str) -> list[tuple[str, bool]]:
    """Split a number format section into ``(char, is_literal)`` pairs."""
    section = _CURRENCY_BRACKET.sub(lambda m: '"' + m.group(1) + '"', section)
    section = re.sub(r"\[[^\]]*\]", "", section)
    chars: list[tuple[str, bool]] = []
    index = 0
    while index < len(section):
        char = section[index]
        if char == '"':
            end = section.find('"', index + 1)
            end = len(section) if end == -1 else end
            chars.extend((c, True) for c in section[index + 1 : end])
            index = end + 1
            continue
        if char == "\\" and index + 1 < len(section):
            chars.append((section[index + 1], True))
            index += 2
            continue
        if char == "_" and index + 1 < len(section):
            chars.append((" ", True))
            index += 2
            continue
        if char == "*" and index + 1 < len(section):
            index += 2
            continue
        chars.append((char, False))
        index += 1
    return chars


def is_elapsed_format(number_format: str | None) -> bool:
    """Return whether a format shows a duration (``[h]``, ``[mm]``, ``[ss]``)."""
    if not number_format:
        return False
    unquoted = re.sub(r'"[^"]*"|\\.', "", number_format)
    return bool(_ELAPSED_TOKEN.search(unquoted))


def _is_date_format(number_format: str) -> bool:
    if is_elapsed_format(number_format):
        return True
    stripped = re.sub(r'"[^"]*"|\\.|\[[^\]]*\]', "", number_format)
    return bool(_DATE_LETTERS.search(stripped))


def _as_datetime(value: datetime | date | time) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.combine(_EXCEL_EPOCH, value)


def _moment_and_elapsed(
    value: datetime | date | time | timedelta,
) -> tuple[datetime, timedelta]:
    """Return the wall-clock moment and the elapsed time since the serial epoch."""
    epoch = datetime.combine(_EXCEL_EPOCH, time())
    if isinstance(value, timedelta):
        elapsed = timedelta(milliseconds=round(value.total_seconds() * 1000))
        return epoch + elapsed, elapsed
    moment = _as_datetime(value)
    elapsed = moment - epoch
    if isinstance(value, (datetime, date)) and moment < _LEAP_BUG_CUTOFF:
        elapsed -= timedelta(days=1)
    return moment, elapsed


def _render_elapsed(token: str, elapsed: timedelta) -> str:
    unit = token.strip("[]").lower()
    seconds = elapsed.total_seconds()
    divisor = {"h": 3600, "m": 60, "s": 1}[unit[0]]
    total = int(abs(seconds) // divisor)
    sign = "-" if seconds < 0 else ""
    return sign + str(total).zfill(len(unit))


def render_date_pattern(value: datetime | date | time | timedelta, pattern: str) -> str:
    """Render a temporal value or duration through an Excel-style date/time format.

    Elapsed tokens (``[h]``, ``[mm]``, ``[ss]``) count from the serial epoch,
    so ``1899-12-31 01:30`` (serial 0.0625) renders as ``1:30`` under ``[h]:mm``.
    """
    moment, elapsed = _moment_and_elapsed(value)
    section = _split_sections(pattern)[0]
    tokens = _DATE_TOKEN.findall(section)
    twelve_hour = any(token.upper() in {"AM/PM", "A/P"} for token in tokens)

    def _neighbour(start: int, step: int) -> str:
        index = start + step
        while 0 <= index < len(tokens):
            token = tokens[index].lower().lstrip("[")
            if token and token[0] in "yhmsd":
                return token
            index += step
        return ""

    out: list[str] = []
    for index, token in enumerate(tokens):
        lowered = token.lower()
        if token.startswith('"'):
            out.append(token[1:-1])
        elif token.startswith("\\"):
            out.append(token[1:])
        elif token.startswith("["):
            if _ELAPSED_TOKEN.fullmatch(token):
                out.append(_render_elapsed(token, elapsed))
        elif lowered == "yyyy":
            out.append(f"{moment.year:04d}")
        elif lowered == "yy":
            out.append(f"{moment.year % 100:02d}")
        elif lowered in {"m", "mm"}:
            minutes = _neighbour(index, -1).startswith("h") or _neighbour(index, 1).startswith("s")
            number = moment.minute if minutes else moment.month
            out.append(f"{number:02d}" if lowered == "mm" else str(number))
        elif lowered == "mmm":
            out.append(_MONTHS[moment.month - 1][:3])
        elif lowered == "mmmm":
            out.append(_MONTHS[moment.month - 1])
        elif lowered == "mmmmm":
            out.append(_MONTHS[moment.month - 1][0])
        elif lowered == "dddd":
            out.append(_WEEKDAYS[moment.weekday()])
        elif lowered == "ddd":
            out.append(_WEEKDAYS[moment.weekday()][:3])
        elif lowered in {"d", "dd"}:
            out.append(f"{moment.day:02d}" if lowered == "dd" else str(moment.day))
        elif lowered in {"h", "hh"}:
            hour = moment.hour
            if twelve_hour:
                hour = hour % 12 or 12
            out.append(f"{hour:02d}" if lowered == "hh" else str(hour))
        elif lowered in {"s", "ss"}:
            out.append(f"{moment.second:02d}" if lowered == "ss" else str(moment.second))
        elif lowered.startswith(".0"):
            digits = len(token) - 1
            fraction = f"{moment.microsecond:06d}"[:digits].ljust(digits, "0")
            out.append("." + fraction)
        elif lowered == "am/pm":
            out.append("AM" if moment.hour < 12 else "PM")
        elif lowered == "a/p":
            out.append("A" if moment.hour < 12 else "P")
        else:
            out.append(token)
    return "".join(out)


@dataclass
class _NumberPattern:
    prefix: str
    pattern: str
    suffix: str
    percent: int
    scale: int


def _parse_number_section(section: str) -> _NumberPattern | None:
    chars = _tokenize_section(section)
    positions = [i for i, (c, lit) in enumerate(chars) if not lit and c in _PLACEHOLDERS]
    if not positions:
        return None
    first, last = positions[0], positions[-1]
    prefix = "".join(c for c, _ in chars[:first])
    pattern = "".join(c for c, lit in chars[first : last + 1] if not lit)
    suffix = "".join(c for c, _ in chars[last + 1 :])
    # Each trailing comma scales the value down by one thousand.
    scale = 0
    while suffix.startswith(","):
        scale += 1
        suffix = suffix[1:]
    percent = sum(1 for c, lit in chars if c == "%" and not lit)
    return _NumberPattern(prefix, pattern, suffix, percent, scale)


class CellFormatter:
    """Render cell values as strings according to ``FormattingOptions``."""

    def __init__(self) -> None:
        self.locale = DEFAULT_LOCALE
        self.options = FormattingOptions()

    def set_locale(self, tag: str) -> bool:
        """Select locale separators; unsupported tags fall back to the default.

        Returns
        -------
        bool
            ``True`` when the tag is supported.
        """
        key = normalize_locale(tag)
        if key in LOCALE_SEPARATORS:
            self.locale = key
            return True
        self.locale = DEFAULT_LOCALE
        return False

    def configure(self, options: FormattingOptions) -> None:
        self.options = options

    @property
    def decimal_separator(self) -> str:
        if self.options.decimal_separator:
            return self.options.decimal_separator
        return LOCALE_SEPARATORS[self.locale][0]

    @property
    def thousand_separator(self) -> str:
        if self.options.thousand_separator is not None:
            return self.options.thousand_separator
        return LOCALE_SEPARATORS[self.locale][1]

    def format(self, value: CellValue, number_format: str | None = GENERAL_FORMAT) -> str:
        """Render one cell value, applying trimming last."""
        text = self._render(value, number_format or GENERAL_FORMAT)
        return text.strip() if self.options.trim else text

    def _render(self, value: CellValue, number_format: str) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, str):
            return value
        if isinstance(value, (datetime, date, time)):
            return self._render_temporal(value, number_format)
        if isinstance(value, timedelta):
            if not self.options.raw and _is_date_format(number_format):
                return render_date_pattern(value, number_format)
            return str(value)
        if isinstance(value, (int, float)):
            if self.options.raw:
                return plain_number(value)
            return self._render_number(value, number_format)
        return str(value)

    def _render_temporal(self, value: datetime | date | time, number_format: str) -> str:
        if self.options.date_fixed_format:
            return render_date_pattern(value, self.options.date_fixed_format)
        if not self.options.raw and _is_date_format(number_format):
            return render_date_pattern(value, number_format)
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        return value.isoformat()

    def _localize(self, text: str) -> str:
        return text.replace(".", self.decimal_separator)

    def _render_general(self, value: int | float) -> str:
        magnitude = abs(value)
        if self.options.allow_scientific and (magnitude >= 1e11 or 0 < magnitude < 1e-9):
            mantissa, exponent = f"{value:.5E}".split("E")
            mantissa = mantissa.rstrip("0").rstrip(".")
            sign, digits = exponent[0], exponent[1:].lstrip("0") or "0"
            return self._localize(f"{mantissa}E{sign}{digits.zfill(2)}")
        return self._localize(plain_number(value))

    def _render_number(self, value: int | float, number_format: str) -> str:
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return str(value)
        sections = _split_sections(number_format)
        section = sections[0]
        signed = True
        if value < 0 and len(sections) > 1 and sections[1]:
            section, value, signed = sections[1], -value, False
        elif value == 0 and len(sections) > 2 and sections[2]:
            section = sections[2]

        if section.strip().lower() in {"general", "@", ""}:
            return self._render_general(value)
        parsed = _parse_number_section(section)
        if parsed is None:
            return "".join(c for c, _ in _tokenize_section(section))

        upper = parsed.pattern.upper()
        if "E+" in upper or "E-" in upper:
            return parsed.prefix + self._render_scientific(value, upper) + parsed.suffix

        number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
        number = number * (Decimal(100) ** parsed.percent) / (Decimal(1000) ** parsed.scale)
        negative = number < 0
        body = self._render_fixed(abs(number), parsed.pattern)
        sign = "-" if negative and signed and any(c in "123456789" for c in body) else ""
        return sign + parsed.prefix + body + parsed.suffix

    def _render_scientific(self, value: int | float, pattern: str) -> str:
        if not self.options.allow_scientific:
            return self._localize(plain_number(value))
        marker = pattern.find("E")
        mantissa_pattern, exponent_pattern = pattern[:marker], pattern[marker + 2 :]
        decimals = 0
        if "." in mantissa_pattern:
            decimals = sum(1 for c in mantissa_pattern.split(".", 1)[1] if c in _PLACEHOLDERS)
        exponent_digits = max(1, sum(1 for c in exponent_pattern if c == "0"))
        mantissa, exponent = f"{value:.{decimals}E}".split("E")
        sign = "-" if exponent.startswith("-") else "+"
        digits = exponent[1:].lstrip("0") or "0"
        return self._localize(mantissa) + "E" + sign + digits.zfill(exponent_digits)

    def _render_fixed(self, number: Decimal, pattern: str) -> str:
        integer_pattern, _, fraction_pattern = pattern.partition(".")
        grouping = "," in integer_pattern
        min_integer = integer_pattern.count("0")
        min_fraction = fraction_pattern.count("0")
        max_fraction = sum(1 for c in fraction_pattern if c in _PLACEHOLDERS)

        quantum = Decimal(1).scaleb(-max_fraction)
        rounded = format(number.quantize(quantum, rounding=ROUND_HALF_UP), "f")
        integer_digits, _, fraction_digits = rounded.partition(".")

        fraction_digits = fraction_digits.rstrip("0")
        fraction_digits = fraction_digits.ljust(min_fraction, "0")
        integer_digits = integer_digits.lstrip("0").rjust(min_integer, "0")
        if grouping and integer_digits:
            groups: list[str] = []
            while len(integer_digits) > 3:
                groups.insert(0, integer_digits[-3:])
                integer_digits = integer_digits[:-3]
            groups.insert(0, integer_digits)
            integer_digits = self.thousand_separator.join(groups)

        if fraction_digits:
            return integer_digits + self.decimal_separator + fraction_digits
        if max_fraction and "." in pattern and not fraction_pattern.count("0"):
            # Excel keeps the separator for "#.##" patterns without a fraction.
            return integer_digits + self.decimal_separator
        return integer_digits
