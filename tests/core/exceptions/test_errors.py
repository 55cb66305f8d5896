"""Tests for the quotepoll exception hierarchy."""

from __future__ import annotations

import pytest

from quotepoll.core.exceptions import (
    ConfigError,
    ErrorCode,
    QuotePollError,
    QuoteSourceError,
    StoreReadError,
    UniverseLoadError,
    UnparsableRecordError,
)


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigError("bad", "poller.deadline"), ErrorCode.CONFIG),
        (QuoteSourceError("down", "twse-mis", 502), ErrorCode.SOURCE),
        (UnparsableRecordError("no date", "2330"), ErrorCode.UNPARSABLE),
        (StoreReadError("corrupt", "2330", "data/2330/realtime.json"), ErrorCode.STORE_READ),
        (UniverseLoadError("missing", "stock_list.json"), ErrorCode.UNIVERSE),
    ],
)
def test_errors_carry_their_code(error: QuotePollError, code: ErrorCode) -> None:
    assert isinstance(error, QuotePollError)
    assert error.error_code == code.value
    assert str(error) == error.message


def test_details_include_structured_fields() -> None:
    error = QuoteSourceError("down", "twse-mis", 502, details={"symbols": 30})

    assert error.details == {"symbols": 30, "source": "twse-mis", "status_code": 502}
    assert error.status_code == 502


def test_optional_fields_are_omitted_from_details() -> None:
    assert ConfigError("bad").details == {}
    assert UnparsableRecordError("no date").details == {}
    assert UniverseLoadError("missing").details == {}
    assert StoreReadError("corrupt", "2330").details == {"symbol": "2330"}


def test_base_error_defaults() -> None:
    error = QuotePollError("boom")

    assert error.error_code == ErrorCode.GENERAL.value
    assert error.details == {}
