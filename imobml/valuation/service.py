
import logging
from datetime import datetime
from typing import Callable, List, Optional
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from imobml.artifacts.models import ModelArtifact, PublishResult
from imobml.artifacts.store import ArtifactStore
from imobml.clock import utcnow
from .config import RetrainConfig
from .dataset import DatasetBuilder, DatasetReport
from .trainers import ModelTrainer, TrainResult, default_trainers, fit_first_available

logger = logging.getLogger(__name__)


class RetrainResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    keys: List[str]
    avm: TrainResult
    tts: TrainResult
    avm_samples: int
    tts_samples: int
    dataset: DatasetReport
    published: PublishResult


class RetrainService:
    """
    Orchestrator for the weekly AVM and time-to-sell retrain.
    Builds both datasets, fits each with the ranked trainers, and publishes
    one artifact per target.
    """

    def __init__(
        self,
        session: Session,
        store: ArtifactStore,
        config: RetrainConfig = RetrainConfig(),
        trainers: Optional[List[ModelTrainer]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.store = store
        self.config = config
        self.trainers = trainers if trainers is not None else default_trainers(config.gbm_enabled)
        self.clock = clock
        self.builder = DatasetBuilder(
            session,
            candidate_limit=config.candidate_limit,
            feature_sample=config.feature_sample,
            max_keys=config.max_feature_keys,
        )

    def run(self) -> RetrainResult:
        logger.info("Starting retrain...")

        keys = self.builder.sample_feature_keys()
        data = self.builder.build(keys)

        avm_result = fit_first_available(self.trainers, data.avm)
        tts_result = fit_first_available(self.trainers, data.tts)
        if not avm_result.ok:
            logger.warning(f"No AVM model this run: {avm_result.error}")
        if not tts_result.ok:
            logger.warning(f"No TTS model this run: {tts_result.error}")

        created_at = self.clock()
        artifacts = {
            self.config.avm_name: (
                self.config.avm_name,
                ModelArtifact(
                    model=avm_result.model,
                    keys=keys,
                    created_at=created_at,
                    samples=len(data.avm),
                    trainer=avm_result.trainer,
                ),
            ),
            self.config.tts_name: (
                self.config.tts_name,
                ModelArtifact(
                    model=tts_result.model,
                    keys=keys,
                    created_at=created_at,
                    samples=len(data.tts),
                    trainer=tts_result.trainer,
                ),
            ),
        }
        published = self.store.publish(artifacts, upload=self.config.upload)

        logger.info(f"Saved models: {published.files}")
        return RetrainResult(
            keys=keys,
            avm=avm_result,
            tts=tts_result,
            avm_samples=len(data.avm),
            tts_samples=len(data.tts),
            dataset=data.report,
            published=published,
        )
