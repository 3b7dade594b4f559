import re
from typing import Optional
import httpx
from pydantic import BaseModel

from .rate_limiter import HostRateLimiter

# Euro/RON amounts such as "€ 123.456", "EUR 95 000" or "lei 450,000"
CURRENCY_PRICE_RE = re.compile(r"(?:€|EUR|eur|Lei|RON|lei)\s?([0-9][0-9 .,_]{2,})")
FALLBACK_NUMBER_RE = re.compile(r"([0-9]{4,})")


class ListingPage(BaseModel):
    url: str
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def parse_price_from_html(html: str) -> Optional[int]:
    """
    Heuristic price extraction from a listing page.

    Returns the first currency-anchored amount above 100, falling back to the
    first run of 4+ digits.
    """
    for match in CURRENCY_PRICE_RE.finditer(html):
        cleaned = re.sub(r"[ ,_.]", "", match.group(1))
        if cleaned.isdigit():
            value = int(cleaned)
            if value > 100:
                return value
    fallback = FALLBACK_NUMBER_RE.search(html)
    if fallback:
        return int(fallback.group(1))
    return None


class ListingClient:
    """Fetches listing pages over HTTP, spaced per host."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        limiter: Optional[HostRateLimiter] = None,
    ):
        self.client = client or httpx.Client(follow_redirects=True)
        self.limiter = limiter or HostRateLimiter(min_interval=1.0)

    def fetch(self, url: str) -> ListingPage:
        """
        Fetch a page. Raises httpx.HTTPError on transport failures; HTTP error
        statuses are returned, not raised.
        """
        self.limiter.wait_if_needed(url)
        response = self.client.get(url)
        return ListingPage(url=url, status_code=response.status_code, text=response.text)

    def close(self) -> None:
        self.client.close()
