"""Core data models for quote polling."""

from quotepoll.core.models.market import MarketSegment, SymbolDescriptor
from quotepoll.core.models.series import (
    MISSING,
    NUMERIC_FIELDS,
    PLACEHOLDER,
    CanonicalRow,
    Missing,
    RawQuote,
    Series,
    Slot,
    coerce_slot,
)

__all__ = [
    "MarketSegment",
    "SymbolDescriptor",
    "CanonicalRow",
    "MISSING",
    "Missing",
    "NUMERIC_FIELDS",
    "PLACEHOLDER",
    "RawQuote",
    "Series",
    "Slot",
    "coerce_slot",
]
