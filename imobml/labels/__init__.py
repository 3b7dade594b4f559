"""Time-to-sell label derivation from listing lifecycle probes."""

from .probe import ListingProbe, ListingState, ProbeResult, looks_like_sold
from .rules import CENSOR_HORIZON_DAYS, TtsLabelValue, derive_label
from .service import LabelService

__all__ = [
    "ListingProbe",
    "ListingState",
    "ProbeResult",
    "looks_like_sold",
    "CENSOR_HORIZON_DAYS",
    "TtsLabelValue",
    "derive_label",
    "LabelService",
]
