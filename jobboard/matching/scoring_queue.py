"""Deferred scoring for newly created applications.

Applications submitted with ``score_mode="deferred"`` are stored with a
placeholder score of 0 and ``score_pending`` set. ``drain`` picks up every
pending row, computes the real score from the job and applicant as they
stand, and clears the flag. Pending state lives in the database, so the
worker process sees submissions made by any other process and nothing is
lost across restarts.
"""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from jobboard.matching.fit_scorer import FitScorer
from jobboard.matching.scorer_protocol import Scorer
from jobboard.persistence.models import Application

logger = logging.getLogger(__name__)


class ScoringQueue:
    """Applications awaiting a score, oldest first."""

    def __init__(self, scorer: Optional[Scorer] = None, batch_size: int = 100):
        self.scorer = scorer or FitScorer()
        self.batch_size = batch_size

    def enqueue(self, application: Application) -> None:
        """Mark an application for scoring; persisted with the caller's commit."""
        application.score = 0
        application.score_pending = True

    def pending(self, session: Session) -> list[str]:
        stmt = (
            select(Application.id)
            .where(Application.score_pending.is_(True))
            .order_by(Application.created_at, Application.id)
        )
        return list(session.execute(stmt).scalars())

    def count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Application).where(
            Application.score_pending.is_(True)
        )
        return session.execute(stmt).scalar_one()

    def drain(self, session: Session) -> int:
        """
        Score every pending application and commit.

        Rows are processed in batches of ``batch_size``, each committed on
        its own. Applications deleted before the drain are simply gone.

        Args:
            session: Database session

        Returns:
            Number of applications scored
        """
        scored = 0
        while True:
            stmt = (
                select(Application)
                .where(Application.score_pending.is_(True))
                .order_by(Application.created_at, Application.id)
                .limit(self.batch_size)
            )
            batch = list(session.execute(stmt).scalars())
            if not batch:
                break

            for application in batch:
                application.score = self.scorer.score(application.job, application.applicant)
                application.score_pending = False
            session.commit()
            scored += len(batch)

        if scored:
            logger.info("Scored %d queued applications", scored)
        return scored


# Default queue used by the application service and the scheduler
scoring_queue = ScoringQueue()
