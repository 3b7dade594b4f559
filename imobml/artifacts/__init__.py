"""Versioned model artifacts: local JSON files, latest pointer, optional mirrors."""

from .models import ModelArtifact, PublishResult, artifact_name, iso_week_tag
from .mirrors import ModelCache, S3Mirror
from .store import ArtifactStore

__all__ = [
    "ModelArtifact",
    "PublishResult",
    "artifact_name",
    "iso_week_tag",
    "ModelCache",
    "S3Mirror",
    "ArtifactStore",
]
