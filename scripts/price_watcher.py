"""
Record price changes for recently updated listings.
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.db.session import SessionLocal
from imobml.ingestion.service import PriceWatcher

logger = logging.getLogger("price_watcher")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    session = SessionLocal()
    watcher = PriceWatcher(session)
    try:
        report = watcher.run()
        logger.info(
            f"Price watch complete: {report.change_count} changes over "
            f"{len(report.attempted)} listings, {report.failure_count} failures"
        )
        return 0
    except Exception:
        logger.exception("Price watch failed")
        return 1
    finally:
        watcher.client.close()
        session.close()


if __name__ == "__main__":
    sys.exit(main())
