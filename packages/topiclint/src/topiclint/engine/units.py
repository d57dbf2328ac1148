"""Human readable renderings of millisecond durations and byte sizes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ..core.errors import InvalidNumericValue

MILLIS_IN_ONE_HOUR = 60 * 60 * 1000
MILLIS_IN_ONE_DAY = 24 * MILLIS_IN_ONE_HOUR
MILLIS_IN_ONE_MONTH = 30 * MILLIS_IN_ONE_DAY
MILLIS_IN_ONE_YEAR = 365 * MILLIS_IN_ONE_DAY

BYTES_IN_ONE_KB = 1024
BYTES_IN_ONE_MB = 1024 * BYTES_IN_ONE_KB
BYTES_IN_ONE_GB = 1024 * BYTES_IN_ONE_MB

INFINITE_DURATION_PHRASE = "forever"
INFINITE_SIZE_PHRASE = "unlimited"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_TENTH = Decimal("0.1")


class UnitKind(str, Enum):
    DURATION = "duration"
    BYTES = "bytes"


@dataclass(frozen=True)
class Unit:
    singular: str
    plural: str
    size: int


DURATION_UNITS: tuple[Unit, ...] = (
    Unit("year", "years", MILLIS_IN_ONE_YEAR),
    Unit("month", "months", MILLIS_IN_ONE_MONTH),
    Unit("day", "days", MILLIS_IN_ONE_DAY),
    Unit("hour", "hours", MILLIS_IN_ONE_HOUR),
)

BYTE_UNITS: tuple[Unit, ...] = (
    Unit("GB", "GB", BYTES_IN_ONE_GB),
    Unit("MB", "MB", BYTES_IN_ONE_MB),
    Unit("KB", "KB", BYTES_IN_ONE_KB),
    Unit("B", "B", 1),
)


@dataclass(frozen=True)
class Magnitude:
    value: Decimal
    unit: str

    @property
    def number(self) -> str:
        if self.value == self.value.to_integral_value():
            return str(int(self.value))
        return format(self.value, "f")

    def __str__(self) -> str:
        return f"{self.number} {self.unit}"


def parse_int(raw: str) -> int:
    """Strict signed decimal integer, no surrounding whitespace."""
    if not _INT_RE.fullmatch(raw):
        raise InvalidNumericValue(raw)
    return int(raw)


def round_tenth(amount: int, unit_size: int) -> Decimal:
    return (Decimal(amount) / Decimal(unit_size)).quantize(_TENTH, rounding=ROUND_HALF_UP)


def _largest_unit(amount: int, units: tuple[Unit, ...]) -> Magnitude:
    if amount < 0:
        raise InvalidNumericValue(str(amount))
    for unit in units[:-1]:
        value = round_tenth(amount, unit.size)
        if value >= 1:
            return Magnitude(value, unit.singular if value == 1 else unit.plural)
    last = units[-1]
    value = round_tenth(amount, last.size)
    return Magnitude(value, last.singular if value == 1 else last.plural)


def format_duration(millis: int) -> Magnitude:
    return _largest_unit(millis, DURATION_UNITS)


def format_bytes(size: int) -> Magnitude:
    return _largest_unit(size, BYTE_UNITS)


def duration_phrase(millis: int, infinite_value: int | None = None) -> str:
    if infinite_value is not None and millis == infinite_value:
        return INFINITE_DURATION_PHRASE
    return f"for {format_duration(millis)}"


def size_phrase(size: int, infinite_value: int | None = None) -> str:
    if infinite_value is not None and size == infinite_value:
        return INFINITE_SIZE_PHRASE
    magnitude = format_bytes(size)
    return f"{magnitude.number}{magnitude.unit}"


def canonical_comment(kind: UnitKind, raw: str, base_phrase: str, infinite_value: int | None = None) -> str:
    amount = parse_int(raw)
    if kind == UnitKind.DURATION:
        phrase = duration_phrase(amount, infinite_value)
    else:
        phrase = size_phrase(amount, infinite_value)
    return f"# {base_phrase} {phrase}"


def matches_canonical(existing: str, canonical: str) -> bool:
    return existing.strip() == canonical


__all__ = [
    "BYTE_UNITS",
    "DURATION_UNITS",
    "INFINITE_DURATION_PHRASE",
    "INFINITE_SIZE_PHRASE",
    "MILLIS_IN_ONE_DAY",
    "MILLIS_IN_ONE_HOUR",
    "MILLIS_IN_ONE_MONTH",
    "MILLIS_IN_ONE_YEAR",
    "Magnitude",
    "Unit",
    "UnitKind",
    "canonical_comment",
    "duration_phrase",
    "format_bytes",
    "format_duration",
    "matches_canonical",
    "parse_int",
    "round_tenth",
    "size_phrase",
]
