import os
from typing import Optional
from pydantic import BaseModel, ConfigDict


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Integration settings read from the process environment."""

    model_config = ConfigDict(protected_namespaces=())

    model_dir: str = "models"

    # Object storage (artifact mirroring)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    s3_bucket: Optional[str] = None
    aws_region: str = "us-east-1"

    # Downstream cache
    redis_url: Optional[str] = None
    model_cache_key: str = "models:latest"

    # Image inference service
    vision_infer_base_url: str = "http://localhost:3000"

    # Higher-capacity trainer switch
    gbm_enabled: bool = True

    @property
    def s3_configured(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key and self.s3_bucket)

    @property
    def cache_configured(self) -> bool:
        return bool(self.redis_url)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            model_dir=os.getenv("MODEL_DIR", "models"),
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            s3_bucket=os.getenv("S3_BUCKET"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            redis_url=os.getenv("REDIS_URL"),
            model_cache_key=os.getenv("MODEL_CACHE_KEY", "models:latest"),
            vision_infer_base_url=(
                os.getenv("VISION_INFER_BASE_URL")
                or os.getenv("NEXT_PUBLIC_SITE_URL")
                or os.getenv("NEXTAUTH_URL")
                or "http://localhost:3000"
            ),
            gbm_enabled=_env_flag("AVM_GBM_ENABLED", True),
        )
