"""Orchestration of one polling session across all symbol batches."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TypeVar
from uuid import uuid4

from loguru import logger

from quotepoll.core.config.settings import QuotePollConfig
from quotepoll.core.data.source import QuoteSource
from quotepoll.core.data.store import JsonSeriesStore, SeriesStore
from quotepoll.core.logging import log_context
from quotepoll.core.models.market import SymbolDescriptor
from quotepoll.core.models.series import CanonicalRow
from quotepoll.core.services.poller import BatchPoller, PollResult
from quotepoll.core.services.reconciler import MergeAction, Reconciler

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    """Per-symbol result of a session."""

    APPENDED = "appended"
    UPDATED = "updated"
    STALE = "stale"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass(frozen=True)
class SymbolOutcome:
    symbol: SymbolDescriptor
    status: OutcomeStatus
    batch: int
    row: CanonicalRow | None = None
    action: MergeAction | None = None


@dataclass(frozen=True)
class BatchSummary:
    index: int
    size: int
    ticks: int
    failed_ticks: int
    elapsed: float


@dataclass(frozen=True)
class SessionReport:
    run_id: str
    started_at: datetime
    outcomes: tuple[SymbolOutcome, ...]
    batches: tuple[BatchSummary, ...]

    def with_status(self, status: OutcomeStatus) -> list[SymbolOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def counts(self) -> dict[str, int]:
        counter = Counter(outcome.status.value for outcome in self.outcomes)
        return {status.value: counter.get(status.value, 0) for status in OutcomeStatus}


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive chunks of ``size``; the last may be shorter."""
    if size <= 0:
        raise ValueError("batch size must be positive")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


class SessionRunner:
    """Drives poll → merge → save for each batch, strictly one batch at a time."""

    def __init__(
        self,
        poller: BatchPoller,
        store: SeriesStore,
        reconciler: Reconciler | None = None,
        *,
        batch_size: int = 30,
        run_id_factory: Callable[[], str] | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._poller = poller
        self._store = store
        self._reconciler = reconciler or Reconciler()
        self._batch_size = batch_size
        self._run_id_factory = run_id_factory or (lambda: uuid4().hex)
        self._now = now or (lambda: datetime.now(UTC))

    @classmethod
    def from_config(cls, config: QuotePollConfig, source: QuoteSource) -> "SessionRunner":
        poller = BatchPoller.from_config(source, config.poller)
        store = JsonSeriesStore(config.store.data_dir, config.store.filename)
        return cls(poller, store, batch_size=config.poller.batch_size)

    async def run(self, symbols: Sequence[SymbolDescriptor]) -> SessionReport:
        run_id = self._run_id_factory()
        started_at = self._now()
        batches = partition(symbols, self._batch_size)
        outcomes: list[SymbolOutcome] = []
        summaries: list[BatchSummary] = []

        with log_context(run_id=run_id):
            logger.info(f"Session started: {len(symbols)} symbols in {len(batches)} batches")
            for index, batch in enumerate(batches, start=1):
                with log_context(batch=index):
                    result = await self._poller.poll(batch)
                    summaries.append(
                        BatchSummary(
                            index=index,
                            size=len(batch),
                            ticks=result.ticks,
                            failed_ticks=result.failed_ticks,
                            elapsed=result.elapsed,
                        )
                    )
                    outcomes.extend(self._apply(batch, result, index))

            report = SessionReport(
                run_id=run_id,
                started_at=started_at,
                outcomes=tuple(outcomes),
                batches=tuple(summaries),
            )
            logger.info(f"Session finished: {report.counts}")
        return report

    def _apply(self, batch: Sequence[SymbolDescriptor], result: PollResult, index: int) -> list[SymbolOutcome]:
        outcomes: list[SymbolOutcome] = []
        for symbol in batch:
            log = logger.bind(symbol=symbol.code)
            row = result.rows.get(symbol.code)
            if row is None:
                log.warning(f"{symbol.code} {symbol.name}: no data received, leaving stored series untouched")
                outcomes.append(SymbolOutcome(symbol, OutcomeStatus.UNRESOLVED, index))
                continue

            merged = self._reconciler.merge_with_action(self._store.load(symbol.code), row)
            try:
                self._store.save(symbol.code, merged.series)
            except OSError as exc:
                log.error(f"{symbol.code}: failed to save series: {exc}")
                outcomes.append(SymbolOutcome(symbol, OutcomeStatus.FAILED, index, merged.row, merged.action))
                continue

            if symbol.code not in result.satisfied:
                status = OutcomeStatus.STALE
                log.warning(f"{symbol.code}: no valid trade price before deadline, merged placeholder row")
            elif merged.action is MergeAction.APPENDED:
                status = OutcomeStatus.APPENDED
            else:
                status = OutcomeStatus.UPDATED
            log.info(f"{symbol.code} {merged.action.value} {merged.row.to_list()}")
            outcomes.append(SymbolOutcome(symbol, status, index, merged.row, merged.action))
        return outcomes


__all__ = [
    "BatchSummary",
    "OutcomeStatus",
    "SessionReport",
    "SessionRunner",
    "SymbolOutcome",
    "partition",
]
