"""Analysis and ExtractedListing models (written by the web app, read here)."""

from sqlalchemy import Column, String, Float, DateTime, JSON, ForeignKey, func, Index
from sqlalchemy.orm import relationship
from .base import Base


class Analysis(Base):
    """One evaluated listing."""

    __tablename__ = "analyses"

    id = Column(String(64), primary_key=True)
    source_url = Column(String(2048), nullable=True)
    status = Column(String(32), default="done")  # 'queued' | 'done' | 'error'

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    extracted_listing = relationship("ExtractedListing", uselist=False, back_populates="analysis")
    feature_snapshot = relationship("FeatureSnapshot", uselist=False, back_populates="analysis")
    score_snapshot = relationship("ScoreSnapshot", uselist=False, back_populates="analysis")
    tts_label = relationship("TtsLabel", uselist=False, back_populates="analysis")

    __table_args__ = (
        Index("idx_analyses_created", "created_at"),
        Index("idx_analyses_source_url", "source_url"),
    )


class ExtractedListing(Base):
    __tablename__ = "extracted_listings"

    analysis_id = Column(String(64), ForeignKey("analyses.id"), primary_key=True)
    price = Column(Float)
    area_m2 = Column(Float)
    photos = Column(JSON)  # list of photo URLs

    analysis = relationship("Analysis", back_populates="extracted_listing")
