"""Quote sources, series storage and symbol universe loading."""

from quotepoll.core.data.source import QuoteSource, TwseQuoteSource
from quotepoll.core.data.store import JsonSeriesStore, SeriesStore
from quotepoll.core.data.universe import load_universe

__all__ = ["JsonSeriesStore", "QuoteSource", "SeriesStore", "TwseQuoteSource", "load_universe"]
