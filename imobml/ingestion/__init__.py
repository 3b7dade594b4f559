"""Price observation ingestion for listed properties."""

from .config import PriceWatchConfig
from .report import PriceWatchReport
from .service import PriceWatcher

__all__ = ["PriceWatchConfig", "PriceWatchReport", "PriceWatcher"]
