"""Repository for Analysis lookups used by the batch jobs."""

from typing import List, Tuple
from sqlalchemy.orm import Session, joinedload

from imobml.db.models.analysis import Analysis, ExtractedListing
from imobml.db.models.score_snapshot import ScoreSnapshot
from imobml.db.models.tts_label import TtsLabel
from .base import BaseRepository


class AnalysisRepository(BaseRepository[Analysis]):
    def __init__(self, session: Session):
        super().__init__(session, Analysis)

    def get_unlabeled(self, limit: int = 1000) -> List[Analysis]:
        """Analyses with a source URL and no TTS label, oldest first."""
        return (
            self.session.query(Analysis)
            .outerjoin(TtsLabel, TtsLabel.analysis_id == Analysis.id)
            .filter(Analysis.source_url.isnot(None), TtsLabel.analysis_id.is_(None))
            .order_by(Analysis.created_at.asc())
            .limit(limit)
            .all()
        )

    def get_recently_updated(self, limit: int = 200) -> List[Analysis]:
        return (
            self.session.query(Analysis)
            .filter(Analysis.source_url.isnot(None))
            .order_by(Analysis.updated_at.desc())
            .limit(limit)
            .all()
        )

    def get_outcome_candidates(self, limit: int = 2000) -> List[Tuple[str, str]]:
        """
        (analysis_id, source_url) pairs with a score snapshot and an
        uncensored TTS label, newest first.

        This is the shared candidate set for dataset building and
        evaluation.
        """
        rows = (
            self.session.query(Analysis.id, Analysis.source_url)
            .join(ScoreSnapshot, ScoreSnapshot.analysis_id == Analysis.id)
            .join(TtsLabel, TtsLabel.analysis_id == Analysis.id)
            .filter(TtsLabel.censored.is_(False), Analysis.source_url.isnot(None))
            .order_by(Analysis.created_at.desc())
            .limit(limit)
            .all()
        )
        return [(r[0], r[1]) for r in rows]

    def get_with_listing(self, limit: int = 2000) -> List[Analysis]:
        """Recent analyses that have an extracted listing, newest first."""
        return (
            self.session.query(Analysis)
            .join(ExtractedListing, ExtractedListing.analysis_id == Analysis.id)
            .options(
                joinedload(Analysis.extracted_listing),
                joinedload(Analysis.feature_snapshot),
            )
            .order_by(Analysis.created_at.desc())
            .limit(limit)
            .all()
        )
