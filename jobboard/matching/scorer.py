"""Ranking jobs and applications by fit score."""
import logging
from dataclasses import dataclass
from typing import Optional

from jobboard.matching.fit_scorer import FitScore, score_breakdown
from jobboard.persistence.models import Application, Job, User

logger = logging.getLogger(__name__)


@dataclass
class ScoredJob:
    """A job with the applicant's fit against it."""

    job: Job
    fit: FitScore

    @property
    def score(self) -> int:
        return self.fit.total

    @property
    def matched_skills(self) -> list[str]:
        return self.fit.matched_skills


def rank_jobs_for_applicant(
    jobs: list[Job],
    applicant: User,
    min_score: float = 0,
    limit: Optional[int] = None,
    require_skill_match: bool = True,
) -> list[ScoredJob]:
    """
    Rank jobs by how well the applicant fits them.

    Args:
        jobs: Candidate jobs (already filtered for visibility)
        applicant: Jobseeker whose profile is scored
        min_score: Minimum fit score to include (0-100)
        limit: Keep only the top N results
        require_skill_match: Drop jobs sharing no skill with the applicant

    Returns:
        ScoredJob list sorted by score descending, newest first on ties
    """
    scored: list[ScoredJob] = []

    for job in jobs:
        fit = score_breakdown(job, applicant)
        if require_skill_match and not fit.matched_skills:
            continue
        if fit.total < min_score:
            continue
        scored.append(ScoredJob(job=job, fit=fit))

    # Stable sorts: newest first, then by score
    scored.sort(key=lambda s: s.job.created_at.timestamp() if s.job.created_at else 0, reverse=True)
    scored.sort(key=lambda s: s.score, reverse=True)

    logger.debug("Ranked %d of %d jobs for %s", len(scored), len(jobs), applicant.id)
    if limit is not None:
        return scored[:limit]
    return scored


def rank_applications(applications: list[Application]) -> list[Application]:
    """Order applications by stored score, highest first, earliest on ties."""
    ordered = sorted(
        applications,
        key=lambda a: a.created_at.timestamp() if a.created_at else 0,
    )
    ordered.sort(key=lambda a: a.score or 0, reverse=True)
    return ordered
