import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from imobml.clock import utcnow
from imobml.db.repositories.analysis_repo import AnalysisRepository
from imobml.db.repositories.metrics_repo import ModelMetricsRepository
from imobml.db.repositories.price_history_repo import PriceHistoryRepository
from imobml.db.repositories.snapshot_repo import ScoreSnapshotRepository
from imobml.db.repositories.tts_label_repo import TtsLabelRepository
from imobml.valuation.dataset import resolve_true_price
from .metrics import absolute_percentage_error, interval_covers, interval_mid, median

logger = logging.getLogger(__name__)


class EvaluationResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_name: str
    mdape: float = 0.0
    pi_coverage: float = 0.0
    sample_count: int = 0
    skipped: int = 0
    failures: Dict[str, str] = Field(default_factory=dict)
    metrics_id: Optional[str] = None


class EvaluationService:
    """
    Scores persisted AVM intervals against realized prices.

    Uses the same candidates as the dataset builder. Each candidate
    contributes an absolute percentage error of the interval midpoint and
    a coverage flag; one ModelMetrics row is appended per run.
    """

    def __init__(
        self,
        session: Session,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.clock = clock
        self.analysis_repo = AnalysisRepository(session)
        self.score_repo = ScoreSnapshotRepository(session)
        self.label_repo = TtsLabelRepository(session)
        self.price_repo = PriceHistoryRepository(session)
        self.metrics_repo = ModelMetricsRepository(session)

    def evaluate(self, model_name: str = "avm_v1", limit: int = 2000) -> EvaluationResult:
        """Compute the aggregates without persisting anything."""
        result = EvaluationResult(model_name=model_name)
        rows: List[Dict[str, float]] = []

        candidates = self.analysis_repo.get_outcome_candidates(limit=limit)
        logger.info(f"Evaluating {len(candidates)} candidate analyses")

        for analysis_id, source_url in candidates:
            try:
                snapshot = self.score_repo.get_for_analysis(analysis_id)
                label = self.label_repo.get_for_analysis(analysis_id)
                if snapshot is None or label is None:
                    result.skipped += 1
                    continue
                if snapshot.avm_low is None or snapshot.avm_high is None:
                    result.skipped += 1
                    continue

                true_price = resolve_true_price(self.price_repo, source_url, label.created_at)
                if true_price is None:
                    result.skipped += 1
                    continue

                low, high = float(snapshot.avm_low), float(snapshot.avm_high)
                rows.append({
                    "ape": absolute_percentage_error(interval_mid(low, high), true_price),
                    "covered": 1.0 if interval_covers(low, high, true_price) else 0.0,
                })
            except Exception as e:
                logger.warning(f"Skipping candidate {analysis_id}: {e}")
                result.failures[analysis_id] = str(e)
                result.skipped += 1

        frame = pd.DataFrame(rows, columns=["ape", "covered"])
        result.sample_count = len(frame)
        result.mdape = median(frame["ape"].tolist())
        result.pi_coverage = float(frame["covered"].mean()) if not frame.empty else 0.0
        return result

    def run(self, model_name: str = "avm_v1", limit: int = 2000) -> EvaluationResult:
        result = self.evaluate(model_name, limit)

        row = self.metrics_repo.append(
            model_name=model_name,
            mdape=result.mdape,
            pi_coverage=result.pi_coverage,
            sample_count=result.sample_count,
            ts=self.clock(),
            details={"sampleCount": result.sample_count, "skipped": result.skipped},
        )
        result.metrics_id = row.id
        logger.info(
            f"{model_name}: MdAPE={result.mdape:.4f} PI-coverage={result.pi_coverage:.3f} "
            f"samples={result.sample_count} skipped={result.skipped}"
        )
        return result
