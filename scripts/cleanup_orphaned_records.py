#!/usr/bin/env python
"""
Clean up orphaned records in the database.

Removes applications pointing at deleted jobs or applicants, jobs whose
owner is gone, and notes or profile entries left without a parent.

Usage:
    python -m scripts.cleanup_orphaned_records
"""
import logging

from scripts.bootstrap import get_session, init_db
from jobboard.logging_config import setup_logging
from jobboard.persistence.cleanup import cleanup_orphaned_records

logger = logging.getLogger(__name__)


def main():
    """Run cleanup and log results."""
    setup_logging()

    logger.info("=" * 60)
    logger.info("Orphaned Records Cleanup")
    logger.info("=" * 60)

    init_db()
    with get_session() as session:
        counts = cleanup_orphaned_records(session)

    for name, count in counts.items():
        logger.info("  %s: %s", name, count)
    logger.info("Cleanup complete. Total records cleaned: %s", sum(counts.values()))


if __name__ == "__main__":
    main()
