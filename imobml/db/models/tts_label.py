from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class TtsLabel(Base):
    """
    Time-to-sell label, at most one per analysis.

    When censored is true, days equals the censoring horizon and the true
    sale date is unknown. observed_days keeps the raw elapsed day count for
    sold/inaccessible outcomes, including those clamped to the horizon.
    """

    __tablename__ = "tts_labels"

    # Primary key doubles as the uniqueness constraint used by insert-or-ignore
    analysis_id = Column(String(64), ForeignKey("analyses.id"), primary_key=True)
    days = Column(Integer, nullable=False)
    censored = Column(Boolean, nullable=False)
    observed_days = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    analysis = relationship("Analysis", back_populates="tts_label")
