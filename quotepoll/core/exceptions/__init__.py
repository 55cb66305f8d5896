"""Exception handling module."""

from quotepoll.core.exceptions.base import (
    ConfigError,
    QuotePollError,
    QuoteSourceError,
    StoreReadError,
    UniverseLoadError,
    UnparsableRecordError,
)
from quotepoll.core.exceptions.codes import ErrorCode

__all__ = [
    "QuotePollError",
    "ConfigError",
    "QuoteSourceError",
    "UnparsableRecordError",
    "StoreReadError",
    "UniverseLoadError",
    "ErrorCode",
]
