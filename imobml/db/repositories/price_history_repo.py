from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from imobml.db.models.price_history import PriceHistory
from .base import BaseRepository


class PriceHistoryRepository(BaseRepository[PriceHistory]):
    def __init__(self, session: Session):
        super().__init__(session, PriceHistory)

    def get_latest(self, source_url: str) -> Optional[PriceHistory]:
        return (
            self.session.query(PriceHistory)
            .filter(PriceHistory.source_url == source_url)
            .order_by(PriceHistory.ts.desc(), PriceHistory.id.desc())
            .first()
        )

    def get_last_before(self, source_url: str, cutoff: datetime) -> Optional[PriceHistory]:
        """Most recent observation at or before cutoff."""
        return (
            self.session.query(PriceHistory)
            .filter(PriceHistory.source_url == source_url, PriceHistory.ts <= cutoff)
            .order_by(PriceHistory.ts.desc(), PriceHistory.id.desc())
            .first()
        )

    def record(
        self,
        source_url: str,
        price: float,
        ts: datetime,
        currency: str = "EUR",
        commit: bool = True,
    ) -> PriceHistory:
        row = PriceHistory(source_url=source_url, price=price, ts=ts, currency=currency)
        self.session.add(row)
        if commit:
            self.session.commit()
        return row
