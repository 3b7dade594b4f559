from sqlalchemy import Column, String, Float, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class ScoreSnapshot(Base):
    """Persisted serving-time model output for one analysis."""

    __tablename__ = "score_snapshots"

    analysis_id = Column(String(64), ForeignKey("analyses.id"), primary_key=True)

    # AVM
    avm_low = Column(Float)
    avm_high = Column(Float)
    avm_mid = Column(Float)
    avm_conf = Column(Float)

    # Time to sell
    tts_bucket = Column(String(20))

    # Yield
    est_rent = Column(Float)
    yield_gross = Column(Float)
    yield_net = Column(Float)

    # Risk / condition
    risk_class = Column(String(20))
    condition_score = Column(Float)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    analysis = relationship("Analysis", back_populates="score_snapshot")
