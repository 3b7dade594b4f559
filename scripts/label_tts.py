"""
Derive time-to-sell labels for analyses that do not have one yet.
Probes each listing URL and stores a (days, censored) label.
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.db.session import SessionLocal
from imobml.labels.service import LabelService

logger = logging.getLogger("label_tts")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    session = SessionLocal()
    try:
        report = LabelService(session).run()
        logger.info(
            f"Labeled {report.labeled_count} analyses "
            f"({len(report.censored)} censored, {len(report.skipped)} skipped, "
            f"{report.failure_count} failed)"
        )
        return 0
    except Exception:
        logger.exception("Labeling run failed")
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
