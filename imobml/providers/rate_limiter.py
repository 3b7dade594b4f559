import time
from typing import Callable, Dict
from urllib.parse import urlparse


class HostRateLimiter:
    """
    Minimum spacing between requests to the same host.

    Owned by the client that uses it; clock and sleep are injectable so the
    limiter can be tested without waiting.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self.clock = clock
        self.sleep = sleep
        self.last_request: Dict[str, float] = {}

    @staticmethod
    def host_of(url: str) -> str:
        return urlparse(url).netloc.lower()

    def wait_if_needed(self, url: str) -> float:
        """Block until the host may be hit again. Returns seconds waited."""
        host = self.host_of(url)
        waited = 0.0
        last = self.last_request.get(host)
        if last is not None:
            elapsed = self.clock() - last
            if elapsed < self.min_interval:
                waited = self.min_interval - elapsed
                self.sleep(waited)
        self.last_request[host] = self.clock()
        return waited
