"""Conversion of raw MIS quote records into canonical daily rows."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from quotepoll.core.exceptions import UnparsableRecordError
from quotepoll.core.models.series import DATE_LENGTH, CanonicalRow, RawQuote, coerce_slot

_NON_DIGIT = re.compile(r"\D")


@dataclass(frozen=True)
class QuoteFields:
    """Field names of a raw quote record."""

    symbol: str = "c"
    date: str = "d"
    timestamp_ms: str = "tlong"
    open: str = "o"
    high: str = "h"
    low: str = "l"
    close: str = "z"
    volume: str = "v"


MIS_FIELDS = QuoteFields()


@dataclass(frozen=True)
class NormalizedQuote:
    """A dated row together with whether it carries a usable trade price."""

    symbol: str | None
    row: CanonicalRow
    valid_price: bool


def format_date(value: object) -> str | None:
    """Keep the first eight digits of ``value``; ``None`` when fewer remain.

    Separators such as ``/`` or ``-`` are dropped, never used to reorder
    month and day.
    """
    if value is None:
        return None
    digits = _NON_DIGIT.sub("", str(value))[:DATE_LENGTH]
    if len(digits) != DATE_LENGTH:
        return None
    return digits


def date_from_epoch_ms(value: object) -> str | None:
    """UTC calendar date (``YYYYMMDD``) of a millisecond epoch timestamp."""
    try:
        millis = float(str(value).strip())
        moment = datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return moment.strftime("%Y%m%d")


class QuoteNormalizer:
    """Derives :class:`CanonicalRow` values from untyped provider records."""

    def __init__(self, fields: QuoteFields = MIS_FIELDS) -> None:
        self._fields = fields

    def derive_date(self, raw: RawQuote) -> str | None:
        explicit = raw.get(self._fields.date)
        if explicit not in (None, ""):
            return format_date(explicit)
        timestamp = raw.get(self._fields.timestamp_ms)
        if timestamp in (None, ""):
            return None
        return format_date(date_from_epoch_ms(timestamp))

    def symbol_of(self, raw: RawQuote) -> str | None:
        value = raw.get(self._fields.symbol)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def normalize(self, raw: RawQuote) -> NormalizedQuote | None:
        """Return the canonical row for ``raw``, or ``None`` if it cannot be dated."""
        if not isinstance(raw, Mapping):
            return None
        date = self.derive_date(raw)
        if date is None:
            return None

        fields = self._fields
        row = CanonicalRow(
            date=date,
            open=coerce_slot(raw.get(fields.open)),
            high=coerce_slot(raw.get(fields.high)),
            low=coerce_slot(raw.get(fields.low)),
            close=coerce_slot(raw.get(fields.close)),
            volume=coerce_slot(raw.get(fields.volume)),
        )
        return NormalizedQuote(symbol=self.symbol_of(raw), row=row, valid_price=row.has_valid_price)

    def normalize_or_raise(self, raw: RawQuote) -> NormalizedQuote:
        normalized = self.normalize(raw)
        if normalized is None:
            symbol = self.symbol_of(raw) if isinstance(raw, Mapping) else None
            details: dict[str, Any] = {}
            if isinstance(raw, Mapping):
                details = {
                    "date": raw.get(self._fields.date),
                    "timestamp_ms": raw.get(self._fields.timestamp_ms),
                }
            raise UnparsableRecordError("Quote record has no derivable date", symbol, details)
        return normalized


__all__ = [
    "MIS_FIELDS",
    "NormalizedQuote",
    "QuoteFields",
    "QuoteNormalizer",
    "date_from_epoch_ms",
    "format_date",
]
