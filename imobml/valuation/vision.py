import logging
from datetime import datetime
from typing import Callable, Optional
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session
from tqdm import tqdm

from imobml.artifacts.models import ModelArtifact, PublishResult
from imobml.artifacts.store import ArtifactStore
from imobml.clock import utcnow
from imobml.db.repositories.analysis_repo import AnalysisRepository
from imobml.db.repositories.snapshot_repo import FeatureSnapshotRepository, ScoreSnapshotRepository
from imobml.providers.vision import VisionClient
from .config import VisionTrainConfig
from .dataset import Dataset
from .feature_builder import build_feature_vector, collect_feature_keys
from .trainers import RidgeTrainer, TrainResult, fit_first_available

logger = logging.getLogger(__name__)


class VisionTrainResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    pseudo_labels: int = 0
    true_labels: int = 0
    discarded: int = 0
    train: Optional[TrainResult] = None
    published: Optional[PublishResult] = None

    @property
    def samples(self) -> int:
        return self.pseudo_labels + self.true_labels


class VisionSelfTrainService:
    """
    Self-training loop for the listing condition regressor.

    Photos of recent listings are scored by the vision service; only
    confident scores (>= threshold or <= 1 - threshold) become pseudo-labels.
    They are combined with editorial condition scores and fit by ridge
    regression on the listing features.
    """

    def __init__(
        self,
        session: Session,
        vision: VisionClient,
        store: ArtifactStore,
        config: VisionTrainConfig = VisionTrainConfig(),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.vision = vision
        self.store = store
        self.config = config
        self.clock = clock
        self.analysis_repo = AnalysisRepository(session)
        self.feature_repo = FeatureSnapshotRepository(session)
        self.score_repo = ScoreSnapshotRepository(session)
        self.trainer = RidgeTrainer()

    def run(self) -> VisionTrainResult:
        logger.info("Starting vision self-train...")
        result = VisionTrainResult()

        analyses = self.analysis_repo.get_with_listing(limit=self.config.take)
        feature_maps = [
            a.feature_snapshot.features if a.feature_snapshot is not None else {}
            for a in analyses
        ]
        keys = collect_feature_keys(feature_maps, max_keys=self.config.max_feature_keys)
        logger.info(f"Feature keys: {keys[:10]}")
        dataset = Dataset(keys)

        for analysis, features in tqdm(
            list(zip(analyses, feature_maps)), desc="Scoring photos", disable=not self.config.progress
        ):
            try:
                photos = analysis.extracted_listing.photos or []
                if not isinstance(photos, list) or not photos:
                    continue
                score = self.vision.classify(photos, limit=self.config.sample_limit)
                if score is None:
                    continue
                if not self.config.is_confident(score):
                    result.discarded += 1
                    continue
                dataset.add(build_feature_vector(features, keys), score)
                result.pseudo_labels += 1
            except Exception as e:
                logger.warning(f"Skipping analysis {analysis.id}: {e}")

        logger.info(f"Pseudo-label samples: {result.pseudo_labels} (discarded {result.discarded})")

        labeled = self.score_repo.get_condition_labeled(
            limit=min(self.config.take, self.config.labeled_limit)
        )
        for snapshot in labeled:
            try:
                features = self.feature_repo.get_features(snapshot.analysis_id)
                dataset.add(build_feature_vector(features, keys), float(snapshot.condition_score))
                result.true_labels += 1
            except Exception as e:
                logger.warning(f"Skipping labeled analysis {snapshot.analysis_id}: {e}")

        logger.info(f"Total training samples: {len(dataset)}")
        if len(dataset) == 0:
            logger.info("No samples to train on; exiting")
            return result

        result.train = fit_first_available([self.trainer], dataset)
        artifact = ModelArtifact(
            model=result.train.model,
            keys=keys,
            created_at=self.clock(),
            samples=len(dataset),
            trainer=result.train.trainer,
        )
        result.published = self.store.publish(
            {self.config.latest_key: (self.config.artifact_name, artifact)},
            upload=self.config.upload,
        )
        if not self.config.upload:
            logger.info("Upload skipped (use --upload to enable)")
        return result
