from pydantic import BaseModel

from .rules import CENSOR_HORIZON_DAYS


class LabelingConfig(BaseModel):
    """Config for the time-to-sell labeling job."""
    limit: int = 1000
    horizon_days: int = CENSOR_HORIZON_DAYS
    probe_interval: float = 1.0
    progress: bool = True
