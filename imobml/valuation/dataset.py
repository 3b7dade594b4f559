import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
import numpy as np
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from imobml.db.repositories.analysis_repo import AnalysisRepository
from imobml.db.repositories.price_history_repo import PriceHistoryRepository
from imobml.db.repositories.snapshot_repo import FeatureSnapshotRepository
from imobml.db.repositories.tts_label_repo import TtsLabelRepository
from .feature_builder import MAX_FEATURE_KEYS, build_feature_vector, collect_feature_keys

logger = logging.getLogger(__name__)


class Dataset:
    """Aligned (x, y) rows for one target, x prefixed with the intercept."""

    def __init__(self, keys: List[str]):
        self.keys = list(keys)
        self._rows: List[List[float]] = []
        self._targets: List[float] = []

    def add(self, x: List[float], y: float) -> None:
        if len(x) != len(self.keys) + 1:
            raise ValueError(f"Expected vector of length {len(self.keys) + 1}, got {len(x)}")
        self._rows.append(list(x))
        self._targets.append(float(y))

    def __len__(self) -> int:
        return len(self._targets)

    @property
    def X(self) -> np.ndarray:
        return np.array(self._rows, dtype=float).reshape(len(self._rows), len(self.keys) + 1)

    @property
    def y(self) -> np.ndarray:
        return np.array(self._targets, dtype=float)


class DatasetReport(BaseModel):
    candidates: int = 0
    avm_rows: int = 0
    tts_rows: int = 0
    missing_price: List[str] = Field(default_factory=list)
    failures: Dict[str, str] = Field(default_factory=dict)


class TrainingData:
    def __init__(self, keys: List[str], avm: Dataset, tts: Dataset, report: DatasetReport):
        self.keys = keys
        self.avm = avm
        self.tts = tts
        self.report = report


def resolve_true_price(
    price_repo: PriceHistoryRepository,
    source_url: str,
    cutoff: datetime,
) -> Optional[float]:
    """
    Realized price: the last observation at or before the label time.

    Returns None when no observation exists or the price is not positive.
    """
    row = price_repo.get_last_before(source_url, cutoff)
    if row is None or row.price is None:
        return None
    price = float(row.price)
    if price <= 0:
        return None
    return price


class DatasetBuilder:
    """
    Joins feature snapshots with realized outcomes.

    Candidates are analyses with a score snapshot and an uncensored TTS
    label. The AVM target is the realized price; the TTS target is the
    label's day count. Each target drops rows by its own rule.
    """

    def __init__(
        self,
        session: Session,
        candidate_limit: int = 2000,
        feature_sample: int = 500,
        max_keys: int = MAX_FEATURE_KEYS,
    ):
        self.session = session
        self.analysis_repo = AnalysisRepository(session)
        self.feature_repo = FeatureSnapshotRepository(session)
        self.label_repo = TtsLabelRepository(session)
        self.price_repo = PriceHistoryRepository(session)
        self.candidate_limit = candidate_limit
        self.feature_sample = feature_sample
        self.max_keys = max_keys

    def sample_feature_keys(self) -> List[str]:
        samples = self.feature_repo.sample_features(limit=self.feature_sample)
        keys = collect_feature_keys(samples, max_keys=self.max_keys)
        logger.info(f"Feature vocabulary ({len(keys)} keys): {keys[:10]}")
        return keys

    def build(self, keys: Optional[List[str]] = None) -> TrainingData:
        keys = keys if keys is not None else self.sample_feature_keys()
        avm = Dataset(keys)
        tts = Dataset(keys)
        report = DatasetReport()

        candidates = self.analysis_repo.get_outcome_candidates(limit=self.candidate_limit)
        report.candidates = len(candidates)
        logger.info(f"Found {len(candidates)} candidate analyses")

        for analysis_id, source_url in candidates:
            try:
                label = self.label_repo.get_for_analysis(analysis_id)
                if label is None:
                    continue
                features: Dict[str, Any] = self.feature_repo.get_features(analysis_id)
                vector = build_feature_vector(features, keys)

                true_price = resolve_true_price(self.price_repo, source_url, label.created_at)
                if true_price is None:
                    report.missing_price.append(analysis_id)
                else:
                    avm.add(vector, true_price)

                if isinstance(label.days, int) and not isinstance(label.days, bool):
                    tts.add(vector, label.days)
            except Exception as e:
                logger.warning(f"Skipping candidate {analysis_id}: {e}")
                report.failures[analysis_id] = str(e)

        report.avm_rows = len(avm)
        report.tts_rows = len(tts)
        logger.info(f"AVM samples={len(avm)} TTS samples={len(tts)}")
        return TrainingData(keys=keys, avm=avm, tts=tts, report=report)
