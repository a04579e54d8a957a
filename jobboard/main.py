"""Background worker: drains the deferred scoring queue on a schedule."""
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config.settings import settings
from jobboard.logging_config import setup_logging
from jobboard.matching.scoring_queue import ScoringQueue, scoring_queue
from jobboard.persistence.database import get_session, init_db

logger = logging.getLogger(__name__)


def drain_scoring_queue(queue: ScoringQueue = scoring_queue) -> int:
    """Score every application still marked pending in the database."""
    with get_session() as session:
        return queue.drain(session)


async def async_main():
    """Async main entry point."""
    setup_logging()
    logger.info("Job board worker starting...")
    logger.info("Database: %s", settings.database_url)
    logger.info("Score mode: %s", settings.score_mode)

    init_db()

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        drain_scoring_queue,
        IntervalTrigger(seconds=settings.score_drain_interval_seconds),
        id="drain_scoring_queue",
        name="Drain scoring queue",
        max_instances=1,
    )
    scheduler.start()
    logger.info(
        "Scheduler started: scoring queue drained every %d seconds",
        settings.score_drain_interval_seconds,
    )

    try:
        while True:
            await asyncio.sleep(60)
    except asyncio.CancelledError:
        logger.info("Shutting down...")
    finally:
        # Score anything still queued before exiting
        drain_scoring_queue()
        scheduler.shutdown()


def main():
    """Main entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown complete.")


if __name__ == "__main__":
    main()
