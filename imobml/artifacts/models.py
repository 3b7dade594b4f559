"""Pydantic models for persisted model artifacts."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from imobml.valuation.feature_builder import build_feature_vector


def iso_week_tag(when: date) -> str:
    """ISO year-week tag, e.g. 2026-42."""
    year, week, _ = when.isocalendar()
    return f"{year}-{week:02d}"


def artifact_name(prefix: str, when: date) -> str:
    return f"{prefix}@{iso_week_tag(when)}.json"


class ModelArtifact(BaseModel):
    """
    A trained model plus the ordered feature vocabulary it was fit on.

    Serialized as {model, keys, createdAt, samples}. For linear models
    model is the weight list and len(model) == len(keys) + 1.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: Optional[Any] = None
    keys: List[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    samples: int = 0
    trainer: Optional[str] = None

    @property
    def is_linear(self) -> bool:
        return isinstance(self.model, list)

    def predict(self, features: Dict[str, Any]) -> float:
        """
        Score a raw feature map with a linear artifact.

        The vector is built with this artifact's keys; if the weights are
        longer than the vector, missing components count as zero.
        """
        if not self.is_linear:
            raise ValueError("predict() requires a linear (weights) artifact")
        vector = build_feature_vector(features, self.keys)
        return float(sum(w * x for w, x in zip(self.model, vector)))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2, exclude_none=False)

    @classmethod
    def from_json(cls, json_str: str) -> "ModelArtifact":
        return cls.model_validate_json(json_str)


class PublishResult(BaseModel):
    """Where each target's artifact ended up."""

    files: Dict[str, str] = Field(default_factory=dict)
    locators: Dict[str, str] = Field(default_factory=dict)
    mirrored: List[str] = Field(default_factory=list)
    cache_key: Optional[str] = None
    invalidated: bool = False
