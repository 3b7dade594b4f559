from pydantic import BaseModel

class PriceWatchConfig(BaseModel):
    """Config for the price watch process."""
    limit: int = 200
    currency: str = "EUR"
    request_interval: float = 1.0
    progress: bool = True
