"""Realized-error evaluation of persisted AVM estimates."""

from .metrics import absolute_percentage_error, interval_covers, median
from .service import EvaluationResult, EvaluationService

__all__ = [
    "absolute_percentage_error",
    "interval_covers",
    "median",
    "EvaluationResult",
    "EvaluationService",
]
