import logging
from enum import Enum
from datetime import datetime
from typing import Callable, Optional
import httpx
from pydantic import BaseModel

from imobml.clock import utcnow
from imobml.providers.listing import ListingClient

logger = logging.getLogger(__name__)

# Romanian and English sold indicators, matched case-insensitively
SOLD_MARKERS = (
    "vândut",
    "vândută",
    "vandut",
    "vanduta",
    "vindut",
    "sold",
    "s-a-vândut",
    "s a vandut",
    "s-a vândut",
    "s a vândut",
    "accepted offer",
)


def looks_like_sold(html: str) -> bool:
    text = html.lower()
    return any(marker in text for marker in SOLD_MARKERS)


class ListingState(str, Enum):
    """Observed lifecycle state of a listing URL."""

    SOLD = "sold"
    INACCESSIBLE = "inaccessible"
    ACTIVE = "active"


class ProbeResult(BaseModel):
    state: ListingState
    when: datetime
    status_code: Optional[int] = None


class ListingProbe:
    """Classifies a listing URL as sold, inaccessible or still active."""

    def __init__(
        self,
        client: Optional[ListingClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client or ListingClient()
        self.clock = clock

    def probe(self, url: str) -> ProbeResult:
        try:
            page = self.client.fetch(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # Unreachable or malformed URLs count as gone, like any failed fetch
            logger.info(f"Probe failed for {url}: {e}")
            return ProbeResult(state=ListingState.INACCESSIBLE, when=self.clock())

        now = self.clock()
        if page.status_code in (404, 410) or not page.ok:
            state = ListingState.INACCESSIBLE
        elif looks_like_sold(page.text):
            state = ListingState.SOLD
        else:
            state = ListingState.ACTIVE
        return ProbeResult(state=state, when=now, status_code=page.status_code)
