from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from .probe import ListingState

# Observation window for time-to-sell, in days
CENSOR_HORIZON_DAYS = 120

SECONDS_PER_DAY = 86400


class TtsLabelValue(BaseModel):
    days: int
    censored: bool
    observed_days: Optional[int] = None


def days_between(a: datetime, b: datetime) -> int:
    """Whole days between two timestamps, rounded half away from zero."""
    seconds = abs((b - a).total_seconds())
    return int(seconds / SECONDS_PER_DAY + 0.5)


def derive_label(
    created_at: datetime,
    probed_at: datetime,
    state: ListingState,
    horizon: int = CENSOR_HORIZON_DAYS,
) -> TtsLabelValue:
    """
    Map a probe outcome to a (days, censored) time-to-sell label.

    Sold or inaccessible listings get the elapsed days as the event time.
    Events seen past the horizon are clamped and marked censored; the raw
    count stays in observed_days. Active listings are right-censored at the
    horizon.
    """
    if state in (ListingState.SOLD, ListingState.INACCESSIBLE):
        elapsed = days_between(created_at, probed_at)
        if elapsed > horizon:
            return TtsLabelValue(days=horizon, censored=True, observed_days=elapsed)
        return TtsLabelValue(days=elapsed, censored=False, observed_days=elapsed)

    return TtsLabelValue(days=horizon, censored=True)
