"""Pytest configuration for the quotepoll test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from quotepoll.core.models.market import SymbolDescriptor


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--quotepoll-run-integration",
        action="store_true",
        default=False,
        help="Run quotepoll integration tests that require the live quote endpoint.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for quotepoll tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks quotepoll tests requiring network access",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--quotepoll-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --quotepoll-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class VirtualClock:
    """Monotonic clock that only advances when slept on or told to."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedSource:
    """Quote source replaying one scripted answer per tick.

    Each script entry is a list of raw records or an exception instance to
    raise. The last entry repeats once the script is exhausted.
    """

    def __init__(
        self,
        script: Sequence[list[dict[str, Any]] | Exception],
        clock: VirtualClock | None = None,
        latency: float = 0.0,
    ) -> None:
        self.script = list(script)
        self.clock = clock
        self.latency = latency
        self.calls: list[list[str]] = []
        self.closed = False

    async def fetch(self, symbols: Sequence[SymbolDescriptor]) -> list[dict[str, Any]]:
        index = min(len(self.calls), len(self.script) - 1)
        self.calls.append([symbol.code for symbol in symbols])
        if self.clock is not None:
            self.clock.advance(self.latency)
        answer = self.script[index]
        if isinstance(answer, Exception):
            raise answer
        return list(answer)

    async def close(self) -> None:
        self.closed = True


def quote(code: str, close: object = "100", **fields: object) -> dict[str, Any]:
    """Build a raw MIS record with sensible defaults."""

    record: dict[str, Any] = {
        "c": code,
        "d": "20250101",
        "o": "99",
        "h": "101",
        "l": "98",
        "z": close,
        "v": "5000",
    }
    record.update(fields)
    return record


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def make_source(clock: VirtualClock) -> Callable[..., ScriptedSource]:
    def _factory(script: Sequence[list[dict[str, Any]] | Exception], latency: float = 0.0) -> ScriptedSource:
        return ScriptedSource(script, clock=clock, latency=latency)

    return _factory


@pytest.fixture
def make_quote() -> Callable[..., dict[str, Any]]:
    return quote


@pytest.fixture
def symbols() -> list[SymbolDescriptor]:
    return [
        SymbolDescriptor(code="2330", name="台積電"),
        SymbolDescriptor(code="2317", name="鴻海"),
    ]
