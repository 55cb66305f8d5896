"""Canonical daily rows and the series they form."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, TypeAlias

PLACEHOLDER = "-"
DATE_LENGTH = 8
NUMERIC_FIELDS: tuple[str, ...] = ("open", "high", "low", "close", "volume")

_DATE_PATTERN = re.compile(r"^\d{8}$")


class Missing(Enum):
    """Sentinel for a numeric slot the provider did not supply."""

    MISSING = PLACEHOLDER

    def __repr__(self) -> str:
        return "MISSING"


MISSING = Missing.MISSING

Number: TypeAlias = int | float
Slot: TypeAlias = Number | Missing
RawQuote: TypeAlias = Mapping[str, Any]


def coerce_slot(value: object) -> Slot:
    """Parse a provider value into a finite number or :data:`MISSING`.

    Integral values collapse to ``int`` so ``"104.00"`` persists as ``104``.
    """
    if value is None or value is MISSING or isinstance(value, bool):
        return MISSING
    if isinstance(value, (int, float)):
        source: int | float | str = value
    elif isinstance(value, str):
        source = value.strip()
        # digit separators are not part of the provider's number format
        if not source or source == PLACEHOLDER or "_" in source:
            return MISSING
    else:
        return MISSING

    try:
        number = float(source)
    except (ValueError, OverflowError):
        # integers beyond float range included
        return MISSING

    if not math.isfinite(number):
        return MISSING
    if number.is_integer():
        return int(number)
    return number


@dataclass(frozen=True, slots=True)
class CanonicalRow:
    """One trading day: ``(date, open, high, low, close, volume)``."""

    date: str
    open: Slot = MISSING
    high: Slot = MISSING
    low: Slot = MISSING
    close: Slot = MISSING
    volume: Slot = MISSING

    def __post_init__(self) -> None:
        if not isinstance(self.date, str) or not _DATE_PATTERN.match(self.date):
            raise ValueError(f"row date must be exactly {DATE_LENGTH} digits, got {self.date!r}")

    @property
    def values(self) -> tuple[Slot, ...]:
        return tuple(getattr(self, name) for name in NUMERIC_FIELDS)

    @property
    def has_valid_price(self) -> bool:
        return self.close is not MISSING

    def with_values(self, values: Sequence[Slot]) -> CanonicalRow:
        if len(values) != len(NUMERIC_FIELDS):
            raise ValueError(f"expected {len(NUMERIC_FIELDS)} values, got {len(values)}")
        return replace(self, **dict(zip(NUMERIC_FIELDS, values)))

    def to_list(self) -> list[object]:
        """Render the persisted ``[date, open, high, low, close, volume]`` shape."""
        return [self.date, *(PLACEHOLDER if value is MISSING else value for value in self.values)]

    @classmethod
    def from_list(cls, items: Sequence[object]) -> CanonicalRow:
        if isinstance(items, (str, bytes)) or len(items) != 1 + len(NUMERIC_FIELDS):
            raise ValueError(f"row must have {1 + len(NUMERIC_FIELDS)} elements: {items!r}")
        date, *numbers = items
        return cls(str(date), *(coerce_slot(number) for number in numbers))


Series: TypeAlias = list[CanonicalRow]


__all__ = [
    "CanonicalRow",
    "DATE_LENGTH",
    "MISSING",
    "Missing",
    "NUMERIC_FIELDS",
    "Number",
    "PLACEHOLDER",
    "RawQuote",
    "Series",
    "Slot",
    "coerce_slot",
]
