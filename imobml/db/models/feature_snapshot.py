from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class FeatureSnapshot(Base):
    """Normalized feature map for one analysis (area, rooms, price, location, ...)."""

    __tablename__ = "feature_snapshots"

    analysis_id = Column(String(64), ForeignKey("analyses.id"), primary_key=True)
    features = Column(JSON, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    analysis = relationship("Analysis", back_populates="feature_snapshot")
