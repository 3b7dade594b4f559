
from pydantic import BaseModel, Field

from .feature_builder import MAX_FEATURE_KEYS


class RetrainConfig(BaseModel):
    """Config for the weekly AVM/TTS retrain."""
    candidate_limit: int = 2000
    feature_sample: int = 500
    max_feature_keys: int = MAX_FEATURE_KEYS
    gbm_enabled: bool = True
    upload: bool = True
    avm_name: str = "avm"
    tts_name: str = "tts"


class VisionTrainConfig(BaseModel):
    """Config for the vision-condition pseudo-label training."""
    threshold: float = Field(0.9, ge=0.0, le=1.0)
    take: int = 2000
    sample_limit: int = 3
    upload: bool = False
    labeled_limit: int = 500
    max_feature_keys: int = MAX_FEATURE_KEYS
    artifact_name: str = "vision-condition"
    latest_key: str = "vision"
    progress: bool = True

    @property
    def lower_bound(self) -> float:
        # Rounded so that threshold 0.9 keeps a score of exactly 0.1
        return round(1.0 - self.threshold, 9)

    def is_confident(self, score: float) -> bool:
        return score >= self.threshold or score <= self.lower_bound
