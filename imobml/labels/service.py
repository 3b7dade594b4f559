import logging
from typing import Optional
from sqlalchemy.orm import Session
from tqdm import tqdm

from imobml.db.repositories.analysis_repo import AnalysisRepository
from imobml.db.repositories.tts_label_repo import TtsLabelRepository
from imobml.providers.listing import ListingClient
from imobml.providers.rate_limiter import HostRateLimiter
from .config import LabelingConfig
from .probe import ListingProbe
from .report import LabelingReport
from .rules import derive_label

logger = logging.getLogger(__name__)


class LabelService:
    """
    Derives time-to-sell labels for analyses that do not have one yet.

    One label per analysis: existing labels are skipped before probing and
    the insert itself ignores conflicts.
    """

    def __init__(
        self,
        session: Session,
        probe: Optional[ListingProbe] = None,
        config: LabelingConfig = LabelingConfig(),
    ):
        self.session = session
        self.analysis_repo = AnalysisRepository(session)
        self.label_repo = TtsLabelRepository(session)
        self.config = config
        self.probe = probe or ListingProbe(
            ListingClient(limiter=HostRateLimiter(min_interval=config.probe_interval))
        )

    def run(self) -> LabelingReport:
        report = LabelingReport()
        analyses = self.analysis_repo.get_unlabeled(limit=self.config.limit)
        logger.info(f"Found {len(analyses)} unlabeled analyses with a source URL")

        for analysis in tqdm(analyses, desc="Labeling time-to-sell", disable=not self.config.progress):
            report.add_attempt(analysis.id)
            try:
                if not analysis.source_url or self.label_repo.exists(analysis.id):
                    report.add_skip(analysis.id)
                    continue

                result = self.probe.probe(analysis.source_url)
                label = derive_label(
                    analysis.created_at,
                    result.when,
                    result.state,
                    horizon=self.config.horizon_days,
                )
                inserted = self.label_repo.insert_if_absent(
                    analysis.id,
                    days=label.days,
                    censored=label.censored,
                    observed_days=label.observed_days,
                    created_at=result.when,
                )
                if not inserted:
                    # Another run labeled it between the check and the insert
                    report.add_skip(analysis.id)
                    continue

                report.add_label(analysis.id, label.days, label.censored)
                logger.debug(
                    f"Labeled {analysis.id} state={result.state.value} "
                    f"days={label.days} censored={label.censored}"
                )
            except Exception as e:
                self.session.rollback()
                logger.error(f"Labeling failed for analysis {analysis.id}: {e}")
                report.add_failure(analysis.id, str(e))

        logger.info(
            f"Labeling finished: labeled={report.labeled_count} "
            f"skipped={len(report.skipped)} failures={report.failure_count}"
        )
        return report
