from typing import Iterable, Optional
import numpy as np


def median(values: Iterable[float]) -> float:
    """Median of the values, 0.0 for an empty input."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.median(arr))


def interval_mid(low: float, high: float) -> float:
    return (low + high) / 2.0


def absolute_percentage_error(predicted: float, actual: float) -> Optional[float]:
    """|predicted - actual| / actual, None when actual is not positive."""
    if actual is None or actual <= 0:
        return None
    return abs(predicted - actual) / actual


def interval_covers(low: float, high: float, actual: float) -> bool:
    return low <= actual <= high
