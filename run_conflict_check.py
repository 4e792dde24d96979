"""
Reservation Conflict Check Runner
Runs a single conflict check outside the ARQ schedule: python run_conflict_check.py
"""

import asyncio
import logging
import sys
from datetime import datetime

from mediatrack.database import SessionLocal
from mediatrack.domain.conflicts.service import ConflictNotificationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


async def run_conflict_check() -> dict:
    db = SessionLocal()
    try:
        summary = await ConflictNotificationService(db).process_once(datetime.now())
        return summary.as_dict()
    finally:
        db.close()


if __name__ == "__main__":
    logger.info("🚀 Running reservation conflict check...")
    try:
        result = asyncio.run(run_conflict_check())
        logger.info(f"✅ Conflict check finished: {result}")
    except KeyboardInterrupt:
        logger.info("👋 Conflict check stopped by user")
    except Exception as e:
        logger.error(f"❌ Conflict check crashed: {e}")
        sys.exit(1)
