"""quotepoll - 盘中实时行情轮询与日线序列合并

在交易时段批量轮询行情源，直到每只股票取得有效成交价或超时，
然后将结果合并进按股票保存的日线序列。
"""

from quotepoll.core.config import QuotePollConfig, load_config
from quotepoll.core.models import MISSING, CanonicalRow, MarketSegment, SymbolDescriptor
from quotepoll.core.services import (
    BatchPoller,
    QuoteNormalizer,
    Reconciler,
    SessionReport,
    SessionRunner,
)

__version__ = "0.1.0"

__all__ = [
    "BatchPoller",
    "CanonicalRow",
    "MISSING",
    "MarketSegment",
    "QuoteNormalizer",
    "QuotePollConfig",
    "Reconciler",
    "SessionReport",
    "SessionRunner",
    "SymbolDescriptor",
    "load_config",
]
