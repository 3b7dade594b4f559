from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session

from imobml.db.models.feature_snapshot import FeatureSnapshot
from imobml.db.models.score_snapshot import ScoreSnapshot
from .base import BaseRepository


class FeatureSnapshotRepository(BaseRepository[FeatureSnapshot]):
    def __init__(self, session: Session):
        super().__init__(session, FeatureSnapshot)

    def get_features(self, analysis_id: str) -> Dict[str, Any]:
        """Feature map for an analysis, empty if no snapshot exists."""
        snap = self.session.get(FeatureSnapshot, analysis_id)
        if snap is None or not isinstance(snap.features, dict):
            return {}
        return snap.features

    def sample_features(self, limit: int = 500) -> List[Dict[str, Any]]:
        """Bounded sample of feature maps in a stable order."""
        snaps = (
            self.session.query(FeatureSnapshot)
            .order_by(FeatureSnapshot.created_at.asc(), FeatureSnapshot.analysis_id.asc())
            .limit(limit)
            .all()
        )
        return [s.features if isinstance(s.features, dict) else {} for s in snaps]


class ScoreSnapshotRepository(BaseRepository[ScoreSnapshot]):
    def __init__(self, session: Session):
        super().__init__(session, ScoreSnapshot)

    def get_for_analysis(self, analysis_id: str) -> Optional[ScoreSnapshot]:
        return self.session.get(ScoreSnapshot, analysis_id)

    def get_condition_labeled(self, limit: int = 500) -> List[ScoreSnapshot]:
        """Snapshots that carry a human/editorial condition score."""
        return (
            self.session.query(ScoreSnapshot)
            .filter(ScoreSnapshot.condition_score.isnot(None))
            .order_by(ScoreSnapshot.analysis_id.asc())
            .limit(limit)
            .all()
        )
