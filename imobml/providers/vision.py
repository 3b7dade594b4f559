import logging
from typing import List, Optional
import httpx

logger = logging.getLogger(__name__)


class VisionClient:
    """
    Client of the image-inference endpoint that scores listing condition.

    Any failure (unreachable service, non-2xx, malformed body) yields None so
    the caller simply gets no pseudo-label for that listing.
    """

    INFER_PATH = "/api/vision/infer"

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client()

    def classify(self, photo_urls: List[str], limit: int = 3) -> Optional[float]:
        try:
            response = self.client.post(
                f"{self.base_url}{self.INFER_PATH}",
                json={"photos": photo_urls[:limit]},
            )
            if not response.is_success:
                logger.debug(f"Vision service returned {response.status_code}")
                return None
            score = response.json().get("score")
            if score is None:
                return None
            return float(score)
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Vision inference failed: {e}")
            return None

    def close(self) -> None:
        self.client.close()
