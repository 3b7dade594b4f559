"""
Evaluate persisted AVM intervals against realized prices and append a
ModelMetrics row (MdAPE and prediction-interval coverage).
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.db.session import SessionLocal
from imobml.evaluation.service import EvaluationService

logger = logging.getLogger("compute_model_metrics")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    session = SessionLocal()
    try:
        result = EvaluationService(session).run()
        logger.info(
            f"Metrics computed: MdAPE={result.mdape:.4f} "
            f"PI-coverage={result.pi_coverage:.3f} n={result.sample_count}"
        )
        return 0
    except Exception:
        logger.exception("Metrics computation failed")
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
