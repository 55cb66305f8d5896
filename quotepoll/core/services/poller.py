"""Deadline-bounded polling of one symbol batch.

Each tick queries the quote source for the whole batch and folds the answers
into a :class:`BatchState`. Polling stops as soon as every symbol has a valid
trade price, or at the first tick boundary after the deadline.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from quotepoll.core.config.settings import PollerConfig
from quotepoll.core.data.source import QuoteSource
from quotepoll.core.exceptions import QuoteSourceError
from quotepoll.core.models.market import SymbolDescriptor
from quotepoll.core.models.series import CanonicalRow, RawQuote
from quotepoll.core.services.normalizer import NormalizedQuote, QuoteNormalizer

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class SymbolState:
    """Best quote observed so far for one symbol."""

    best_row: CanonicalRow | None = None
    satisfied: bool = False

    def observe(self, quote: NormalizedQuote) -> None:
        if quote.valid_price:
            # later valid quotes supersede earlier ones
            self.best_row = quote.row
            self.satisfied = True
        elif self.best_row is None:
            # first placeholder wins until a valid price shows up
            self.best_row = quote.row


@dataclass
class BatchState:
    """Per-batch mapping of symbol code to :class:`SymbolState`."""

    symbols: dict[str, SymbolState] = field(default_factory=dict)

    @classmethod
    def start(cls, codes: Iterable[str]) -> "BatchState":
        return cls({code: SymbolState() for code in codes})

    @property
    def all_satisfied(self) -> bool:
        return all(state.satisfied for state in self.symbols.values())

    def observe(self, code: str | None, quote: NormalizedQuote) -> bool:
        state = self.symbols.get(code) if code is not None else None
        if state is None:
            return False
        state.observe(quote)
        return True

    def best_rows(self) -> dict[str, CanonicalRow]:
        return {code: state.best_row for code, state in self.symbols.items() if state.best_row is not None}

    def satisfied_codes(self) -> frozenset[str]:
        return frozenset(code for code, state in self.symbols.items() if state.satisfied)

    def unresolved_codes(self) -> tuple[str, ...]:
        return tuple(code for code, state in self.symbols.items() if state.best_row is None)


@dataclass(frozen=True)
class PollResult:
    """Outcome of polling one batch."""

    rows: dict[str, CanonicalRow]
    satisfied: frozenset[str]
    unresolved: tuple[str, ...]
    ticks: int
    failed_ticks: int
    elapsed: float

    @property
    def stale(self) -> tuple[str, ...]:
        """Symbols with a placeholder row but no valid trade price."""
        return tuple(code for code in self.rows if code not in self.satisfied)


class BatchPoller:
    """Repeatedly queries a :class:`QuoteSource` until a batch is satisfied or times out."""

    def __init__(
        self,
        source: QuoteSource,
        normalizer: QuoteNormalizer | None = None,
        *,
        retry_interval: float = 3.0,
        deadline: float = 30.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if retry_interval < 0:
            raise ValueError("retry_interval must be non-negative")
        if deadline <= 0:
            raise ValueError("deadline must be positive")
        self._source = source
        self._normalizer = normalizer or QuoteNormalizer()
        self._retry_interval = retry_interval
        self._deadline = deadline
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        source: QuoteSource,
        config: PollerConfig,
        normalizer: QuoteNormalizer | None = None,
        **kwargs: object,
    ) -> "BatchPoller":
        return cls(
            source,
            normalizer,
            retry_interval=config.retry_interval,
            deadline=config.deadline,
            **kwargs,  # type: ignore[arg-type]
        )

    async def poll(self, batch: Sequence[SymbolDescriptor]) -> PollResult:
        state = BatchState.start(symbol.code for symbol in batch)
        started = self._clock()
        ticks = 0
        failed_ticks = 0

        while batch and self._clock() - started < self._deadline and not state.all_satisfied:
            ticks += 1
            records = await self._fetch_tick(batch, ticks)
            if records is None:
                failed_ticks += 1
                records = []

            self._fold(state, records, ticks)

            if state.all_satisfied:
                logger.info(f"All {len(batch)} symbols satisfied after tick {ticks}")
                break

            remaining = self._deadline - (self._clock() - started)
            if remaining <= 0:
                break
            await self._sleep(min(self._retry_interval, remaining))

        elapsed = self._clock() - started
        result = PollResult(
            rows=state.best_rows(),
            satisfied=state.satisfied_codes(),
            unresolved=state.unresolved_codes(),
            ticks=ticks,
            failed_ticks=failed_ticks,
            elapsed=elapsed,
        )
        if batch and not state.all_satisfied:
            logger.warning(
                f"Batch deadline reached after {ticks} ticks: "
                f"{len(result.stale)} without valid price, {len(result.unresolved)} unresolved"
            )
        return result

    async def _fetch_tick(self, batch: Sequence[SymbolDescriptor], tick: int) -> list[RawQuote] | None:
        try:
            return await self._source.fetch(batch)
        except QuoteSourceError as error:
            logger.bind(error_code=error.error_code).warning(f"Tick {tick} failed: {error.message}")
        except Exception as exc:
            logger.opt(exception=exc).warning(f"Tick {tick} failed with unexpected error: {exc}")
        return None

    def _fold(self, state: BatchState, records: Iterable[RawQuote], tick: int) -> None:
        for raw in records:
            quote = self._normalizer.normalize(raw)
            if quote is None:
                logger.debug(f"Tick {tick}: dropping undatable record {raw!r}")
                continue
            if not state.observe(quote.symbol, quote):
                logger.debug(f"Tick {tick}: ignoring record for unrequested symbol {quote.symbol}")
                continue
            if quote.valid_price:
                logger.bind(symbol=quote.symbol).debug(f"Tick {tick}: valid price {quote.row.close}")
            else:
                logger.bind(symbol=quote.symbol).debug(f"Tick {tick}: trade price is a placeholder")


__all__ = ["BatchPoller", "BatchState", "Clock", "PollResult", "Sleep", "SymbolState"]
