from sqlalchemy import Column, String, Integer, Float, DateTime, JSON, func, Index
from .base import Base


class ModelMetrics(Base):
    """One evaluation run. Rows are appended, never updated."""

    __tablename__ = "model_metrics"

    id = Column(String(36), primary_key=True)
    ts = Column(DateTime, nullable=False)
    model_name = Column(String(50), nullable=False)
    mdape = Column(Float, nullable=False)
    pi_coverage = Column(Float, nullable=False)
    sample_count = Column(Integer, nullable=False)
    details = Column(JSON)

    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_model_metrics_model_ts", "model_name", "ts"),
    )
