import logging
from typing import Callable, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from tqdm import tqdm

from imobml.db.repositories.analysis_repo import AnalysisRepository
from imobml.db.repositories.price_history_repo import PriceHistoryRepository
from imobml.clock import utcnow
from imobml.providers.listing import ListingClient, parse_price_from_html
from imobml.providers.rate_limiter import HostRateLimiter
from .config import PriceWatchConfig
from .report import PriceWatchReport

logger = logging.getLogger(__name__)


class PriceWatcher:
    """
    Appends price observations for recently updated listings.

    A row is written only when the parsed price differs from the latest
    stored observation for the URL.
    """

    def __init__(
        self,
        session: Session,
        client: Optional[ListingClient] = None,
        config: PriceWatchConfig = PriceWatchConfig(),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.analysis_repo = AnalysisRepository(session)
        self.price_repo = PriceHistoryRepository(session)
        self.client = client or ListingClient(
            limiter=HostRateLimiter(min_interval=config.request_interval)
        )
        self.config = config
        self.clock = clock

    def run(self) -> PriceWatchReport:
        report = PriceWatchReport()
        analyses = self.analysis_repo.get_recently_updated(limit=self.config.limit)
        logger.info(f"Watching prices for {len(analyses)} listings")

        # Several analyses can point at the same URL
        seen = set()
        for analysis in tqdm(analyses, desc="Watching prices", disable=not self.config.progress):
            url = analysis.source_url
            if not url or url in seen:
                continue
            seen.add(url)
            report.add_attempt(url)

            try:
                page = self.client.fetch(url)
                if not page.ok:
                    report.add_failure(url, f"HTTP {page.status_code}")
                    continue

                price = parse_price_from_html(page.text)
                if price is None:
                    report.add_unchanged(url)
                    continue

                last = self.price_repo.get_latest(url)
                if last is not None and float(last.price) == float(price):
                    report.add_unchanged(url)
                    continue

                self.price_repo.record(url, float(price), ts=self.clock(), currency=self.config.currency)
                report.add_change(url, float(price))
                logger.debug(f"Inserted price {price} for {url}")
            except Exception as e:
                self.session.rollback()
                logger.warning(f"Failed to watch {url}: {e}")
                report.add_failure(url, str(e))

        logger.info(
            f"Price watch finished: changed={report.change_count} "
            f"unchanged={len(report.unchanged)} failures={report.failure_count}"
        )
        return report
