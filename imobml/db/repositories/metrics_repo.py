import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy.orm import Session

from imobml.db.models.model_metrics import ModelMetrics
from .base import BaseRepository


class ModelMetricsRepository(BaseRepository[ModelMetrics]):
    def __init__(self, session: Session):
        super().__init__(session, ModelMetrics)

    def append(
        self,
        model_name: str,
        mdape: float,
        pi_coverage: float,
        sample_count: int,
        ts: datetime,
        details: Optional[Dict[str, Any]] = None,
    ) -> ModelMetrics:
        """Insert a new metrics row. Existing rows are never touched."""
        row = ModelMetrics(
            id=str(uuid.uuid4()),
            ts=ts,
            model_name=model_name,
            mdape=mdape,
            pi_coverage=pi_coverage,
            sample_count=sample_count,
            details=details or {},
        )
        return self.add(row)

    def history(self, model_name: str, limit: int = 50) -> List[ModelMetrics]:
        return (
            self.session.query(ModelMetrics)
            .filter(ModelMetrics.model_name == model_name)
            .order_by(ModelMetrics.ts.desc())
            .limit(limit)
            .all()
        )
