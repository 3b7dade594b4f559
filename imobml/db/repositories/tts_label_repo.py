from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from imobml.db.models.tts_label import TtsLabel
from .base import BaseRepository


class TtsLabelRepository(BaseRepository[TtsLabel]):
    def __init__(self, session: Session):
        super().__init__(session, TtsLabel)

    def get_for_analysis(self, analysis_id: str) -> Optional[TtsLabel]:
        return self.session.get(TtsLabel, analysis_id)

    def exists(self, analysis_id: str) -> bool:
        return (
            self.session.query(TtsLabel.analysis_id)
            .filter(TtsLabel.analysis_id == analysis_id)
            .first()
            is not None
        )

    def insert_if_absent(
        self,
        analysis_id: str,
        days: int,
        censored: bool,
        observed_days: Optional[int] = None,
        created_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> bool:
        """
        Insert a label unless one already exists for the analysis.

        Relies on the primary key of tts_labels (ON CONFLICT DO NOTHING),
        so overlapping runs cannot create a second label.

        Returns:
            True if a row was inserted
        """
        values = {
            "analysis_id": analysis_id,
            "days": days,
            "censored": censored,
            "observed_days": observed_days,
        }
        if created_at is not None:
            values["created_at"] = created_at

        stmt = self._dialect_insert().values(**values)
        stmt = stmt.on_conflict_do_nothing(index_elements=[TtsLabel.analysis_id])
        result = self.session.execute(stmt)
        if commit:
            self.session.commit()
        return result.rowcount == 1
