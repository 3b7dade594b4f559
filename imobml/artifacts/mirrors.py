import json
import logging
from pathlib import Path
from typing import Any, Optional
import boto3
import redis

from imobml.config.settings import Settings

logger = logging.getLogger(__name__)


class S3Mirror:
    """
    Best-effort upload of artifacts to object storage.

    upload() returns the s3:// locator, or None when the upload failed. The
    local file stays authoritative either way.
    """

    def __init__(self, bucket: str, client: Any, prefix: str = "models"):
        self.bucket = bucket
        self.client = client
        self.prefix = prefix.strip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["S3Mirror"]:
        if not settings.s3_configured:
            return None
        client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        return cls(bucket=settings.s3_bucket, client=client)

    def upload(self, file_path: Path) -> Optional[str]:
        key = f"{self.prefix}/{Path(file_path).name}"
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=Path(file_path).read_bytes(),
                ContentType="application/json",
            )
        except Exception as e:
            logger.warning(f"Upload of {file_path} to s3://{self.bucket}/{key} failed: {e}")
            return None
        return f"s3://{self.bucket}/{key}"


class ModelCache:
    """Publishes the latest-artifact pointer to a downstream cache."""

    def __init__(self, client: Any, key: str = "models:latest"):
        self.client = client
        self.key = key

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["ModelCache"]:
        if not settings.cache_configured:
            return None
        return cls(redis.Redis.from_url(settings.redis_url), key=settings.model_cache_key)

    def set(self, payload: dict) -> Optional[str]:
        try:
            self.client.set(self.key, json.dumps(payload))
        except Exception as e:
            logger.warning(f"Cache update of {self.key} failed: {e}")
            return None
        return self.key

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
