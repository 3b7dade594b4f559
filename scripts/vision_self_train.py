"""
Self-train the listing condition model from confident vision pseudo-labels
plus editorial condition scores.

Usage:
    python scripts/vision_self_train.py --threshold 0.9 --take 2000 --sampleLimit 3 --upload
"""

import argparse
import logging
import os
import sys

from pydantic import ValidationError

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.artifacts.mirrors import ModelCache, S3Mirror
from imobml.artifacts.store import ArtifactStore
from imobml.config.settings import Settings
from imobml.db.session import SessionLocal
from imobml.providers.vision import VisionClient
from imobml.valuation.config import VisionTrainConfig
from imobml.valuation.vision import VisionSelfTrainService

logger = logging.getLogger("vision_self_train")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vision condition pseudo-label training")
    parser.add_argument("--threshold", type=float, default=0.9,
                        help="Keep scores >= threshold or <= 1 - threshold")
    parser.add_argument("--take", type=int, default=2000,
                        help="Number of recent listings to score")
    parser.add_argument("--sampleLimit", dest="sample_limit", type=int, default=3,
                        help="Photos sent per listing")
    parser.add_argument("--upload", action="store_true",
                        help="Mirror the artifact to S3 when configured")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    args = parse_args(argv)
    settings = Settings.from_env()

    try:
        config = VisionTrainConfig(
            threshold=args.threshold,
            take=args.take,
            sample_limit=args.sample_limit,
            upload=args.upload,
        )
    except ValidationError as e:
        logger.error(f"Invalid arguments: {e}")
        return 1

    cache = ModelCache.from_settings(settings)
    store = ArtifactStore(
        settings.model_dir,
        mirror=S3Mirror.from_settings(settings),
        cache=cache,
    )
    vision = VisionClient(settings.vision_infer_base_url)
    session = SessionLocal()
    try:
        result = VisionSelfTrainService(session, vision, store, config=config).run()
        if result.published is None:
            logger.info("No samples; no artifact written")
        else:
            logger.info(
                f"Saved {result.published.files} from {result.samples} samples "
                f"({result.pseudo_labels} pseudo, {result.true_labels} labeled)"
            )
        return 0
    except Exception:
        logger.exception("Vision self-train failed")
        return 1
    finally:
        session.close()
        vision.close()
        if cache is not None:
            cache.close()


if __name__ == "__main__":
    sys.exit(main())
