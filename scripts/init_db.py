"""
Create all tables on the configured DATABASE_URL (development helper).
Production schemas are managed with alembic.
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from imobml.db.config import DATABASE_URL
from imobml.db.models import Base
from imobml.db.session import engine

logger = logging.getLogger("init_db")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        logger.info(f"Creating tables on {DATABASE_URL}")
        Base.metadata.create_all(bind=engine)
        logger.info(f"Tables ready: {sorted(Base.metadata.tables)}")
        return 0
    except Exception:
        logger.exception("Table creation failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
