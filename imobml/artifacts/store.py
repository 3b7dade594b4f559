import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from imobml.clock import utcnow
from .mirrors import ModelCache, S3Mirror
from .models import ModelArtifact, PublishResult, artifact_name

logger = logging.getLogger(__name__)

LATEST_FILE = "latest.json"
INVALIDATE_FILE = "INVALIDATE"


class ArtifactStore:
    """
    Versioned JSON artifacts under a models directory.

    Layout:
        {prefix}@{YYYY}-{WW}.json   one artifact per target per ISO week
        latest.json                 target -> filename (or remote locator), merged
        INVALIDATE                  timestamp, written after a remote mirror
    """

    def __init__(
        self,
        model_dir: Union[str, Path] = "models",
        mirror: Optional[S3Mirror] = None,
        cache: Optional[ModelCache] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.model_dir = Path(model_dir)
        self.mirror = mirror
        self.cache = cache
        self.clock = clock

    @property
    def latest_path(self) -> Path:
        return self.model_dir / LATEST_FILE

    @property
    def invalidate_path(self) -> Path:
        return self.model_dir / INVALIDATE_FILE

    def save(self, prefix: str, artifact: ModelArtifact) -> Path:
        """Write the artifact for the current ISO week, replacing a same-week file."""
        self.model_dir.mkdir(parents=True, exist_ok=True)
        path = self.model_dir / artifact_name(prefix, self.clock().date())
        path.write_text(artifact.to_json(), encoding="utf-8")
        logger.info(f"Saved artifact {path} (samples={artifact.samples})")
        return path

    def load(self, filename: str) -> ModelArtifact:
        return ModelArtifact.from_json((self.model_dir / filename).read_text(encoding="utf-8"))

    def read_latest(self) -> Dict[str, str]:
        if not self.latest_path.exists():
            return {}
        try:
            data = json.loads(self.latest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable {self.latest_path}")
            return {}
        return data if isinstance(data, dict) else {}

    def update_latest(self, entries: Dict[str, str]) -> Dict[str, str]:
        """Merge entries into latest.json; other targets' pointers are kept."""
        self.model_dir.mkdir(parents=True, exist_ok=True)
        latest = self.read_latest()
        latest.update(entries)
        latest["ts"] = self.clock().isoformat()
        self.latest_path.write_text(json.dumps(latest, indent=2), encoding="utf-8")
        return latest

    def write_invalidate_marker(self) -> Path:
        self.invalidate_path.write_text(self.clock().isoformat(), encoding="utf-8")
        return self.invalidate_path

    def publish(
        self,
        artifacts: Dict[str, Tuple[str, ModelArtifact]],
        upload: bool = True,
    ) -> PublishResult:
        """
        Save artifacts, optionally mirror them, then update latest.json and
        the cache.

        Args:
            artifacts: latest.json key -> (file prefix, artifact)
            upload: Mirror to object storage when a mirror is configured
        """
        result = PublishResult()
        for target, (prefix, artifact) in artifacts.items():
            path = self.save(prefix, artifact)
            result.files[target] = path.name
            result.locators[target] = path.name

        if upload and self.mirror is not None:
            for target in artifacts:
                locator = self.mirror.upload(self.model_dir / result.files[target])
                if locator:
                    result.locators[target] = locator
                    result.mirrored.append(target)
                    logger.info(f"Uploaded {target} artifact to {locator}")
        elif upload:
            logger.info("Object storage not configured, skipping upload")

        latest = self.update_latest(dict(result.locators))

        if self.cache is not None:
            result.cache_key = self.cache.set(latest)

        if result.mirrored:
            self.write_invalidate_marker()
            result.invalidated = True

        return result
