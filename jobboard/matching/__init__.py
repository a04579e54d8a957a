"""Candidate fit scoring and ranking."""
from .fit_scorer import FitScore, FitScorer, compute_score, score_breakdown
from .scorer import ScoredJob, rank_applications, rank_jobs_for_applicant
from .scoring_queue import ScoringQueue, scoring_queue

__all__ = [
    "FitScore",
    "FitScorer",
    "compute_score",
    "score_breakdown",
    "ScoredJob",
    "rank_applications",
    "rank_jobs_for_applicant",
    "ScoringQueue",
    "scoring_queue",
]
