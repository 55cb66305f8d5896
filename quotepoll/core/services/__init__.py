"""Polling, normalization and reconciliation services."""

from quotepoll.core.services.normalizer import NormalizedQuote, QuoteNormalizer
from quotepoll.core.services.poller import BatchPoller, BatchState, PollResult, SymbolState
from quotepoll.core.services.reconciler import MergeAction, MergeResult, Reconciler, merge_rows, resolve
from quotepoll.core.services.session import (
    BatchSummary,
    OutcomeStatus,
    SessionReport,
    SessionRunner,
    SymbolOutcome,
    partition,
)

__all__ = [
    "BatchPoller",
    "BatchState",
    "BatchSummary",
    "MergeAction",
    "MergeResult",
    "NormalizedQuote",
    "OutcomeStatus",
    "PollResult",
    "QuoteNormalizer",
    "Reconciler",
    "SessionReport",
    "SessionRunner",
    "SymbolOutcome",
    "SymbolState",
    "merge_rows",
    "partition",
    "resolve",
]
