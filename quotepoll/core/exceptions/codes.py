"""Canonical error codes shared across quotepoll layers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable identifiers attached to every :class:`QuotePollError`."""

    GENERAL = "GENERAL_ERROR"
    CONFIG = "CONFIG_ERROR"
    SOURCE = "QUOTE_SOURCE_ERROR"
    UNPARSABLE = "UNPARSABLE_RECORD"
    STORE_READ = "STORE_READ_ERROR"
    UNIVERSE = "UNIVERSE_LOAD_ERROR"


__all__ = ["ErrorCode"]
