from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from .base import Base


class PriceHistory(Base):
    """Append-only price observations per listing URL."""

    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_url = Column(String(2048), nullable=False)
    ts = Column(DateTime, nullable=False)
    price = Column(Float, nullable=False)
    currency = Column(String(10), default="EUR")

    __table_args__ = (
        Index("idx_price_history_url_ts", "source_url", "ts"),
    )
