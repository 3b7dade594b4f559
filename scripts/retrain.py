"""
Weekly retrain of the AVM and time-to-sell models.

Writes models/avm@YYYY-WW.json and models/tts@YYYY-WW.json, updates
models/latest.json and, when configured, mirrors to S3 and refreshes the
Redis pointer.
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.artifacts.mirrors import ModelCache, S3Mirror
from imobml.artifacts.store import ArtifactStore
from imobml.config.settings import Settings
from imobml.db.session import SessionLocal
from imobml.valuation.config import RetrainConfig
from imobml.valuation.service import RetrainService

logger = logging.getLogger("retrain")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    settings = Settings.from_env()
    cache = ModelCache.from_settings(settings)
    store = ArtifactStore(
        settings.model_dir,
        mirror=S3Mirror.from_settings(settings),
        cache=cache,
    )
    session = SessionLocal()
    try:
        service = RetrainService(session, store, config=RetrainConfig(gbm_enabled=settings.gbm_enabled))
        result = service.run()
        logger.info(
            f"Saved models {result.published.locators} "
            f"(avm samples={result.avm_samples} via {result.avm.trainer}, "
            f"tts samples={result.tts_samples} via {result.tts.trainer})"
        )
        return 0
    except Exception:
        logger.exception("Retrain failed")
        return 1
    finally:
        session.close()
        if cache is not None:
            cache.close()


if __name__ == "__main__":
    sys.exit(main())
