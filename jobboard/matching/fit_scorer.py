"""Candidate-to-job fit scoring.

The fit score is a single deterministic 0-100 number built from three
independently capped components:

- skills (50): share of the job's skills that the applicant covers, where a
  skill matches when either string contains the other, ignoring case;
- experience (30): total dated work history in 365-day years, capped at 10;
- education (20): number of education entries, capped at 3.

Scoring never raises. Malformed entries (unparseable or reversed dates,
non-string skills) contribute nothing and are logged at DEBUG.
"""
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dateutil_parser

from jobboard.exceptions import ValidationError
from jobboard.persistence.models import as_utc

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 50
EXPERIENCE_WEIGHT = 30
EDUCATION_WEIGHT = 20

EXPERIENCE_CAP_YEARS = 10
EDUCATION_CAP_ENTRIES = 3
SECONDS_PER_YEAR = 365 * 24 * 60 * 60


@dataclass
class FitScore:
    """Fit score with its per-component contributions."""

    skills: float = 0.0
    experience: float = 0.0
    education: float = 0.0
    matched_skills: list[str] = field(default_factory=list)
    experience_years: float = 0.0

    @property
    def total(self) -> int:
        """Sum of the components, rounded half up."""
        return math.floor(self.skills + self.experience + self.education + 0.5)


def _get(obj: Any, name: str) -> Any:
    """Read a field from a model instance or a plain mapping."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _as_list(value: Any) -> list:
    if value is None or isinstance(value, (str, bytes)):
        return []
    try:
        return list(value)
    except TypeError:
        return []


def _clean_skills(values: Any) -> list[str]:
    skills = []
    for value in _as_list(values):
        if not isinstance(value, str) or not value.strip():
            logger.debug("Ignoring malformed skill entry: %r", value)
            continue
        skills.append(value.strip().lower())
    return skills


def skills_match(job_skill: str, applicant_skill: str) -> bool:
    """Case-insensitive containment in either direction ("React" ~ "ReactJS")."""
    a = job_skill.strip().lower()
    b = applicant_skill.strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def parse_date(value: Any) -> Optional[datetime]:
    """Parse a date, datetime or ISO string into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return as_utc(value)
    if isinstance(value, str):
        try:
            return as_utc(dateutil_parser.parse(value))
        except (ValueError, OverflowError) as e:
            raise ValidationError("date", f"cannot parse {value!r}") from e
    raise ValidationError("date", f"unsupported type {type(value).__name__}")


def experience_years(entry: Any) -> float:
    """Duration of one experience entry in years; 0 when either date is missing.

    Raises:
        ValidationError: If a date cannot be parsed or the end precedes the start
    """
    start = parse_date(_get(entry, "start_date"))
    end = parse_date(_get(entry, "end_date"))
    if start is None or end is None:
        return 0.0
    seconds = (end - start).total_seconds()
    if seconds < 0:
        raise ValidationError("experience", "end date precedes start date")
    return seconds / SECONDS_PER_YEAR


def skill_component(job: Any, applicant: Any) -> tuple[float, list[str]]:
    """Return (skill contribution, matched job skills)."""
    job_skills = _as_list(_get(job, "skills"))
    applicant_skills = _clean_skills(_get(applicant, "skills"))
    if not job_skills or not applicant_skills:
        return 0.0, []

    matched = []
    for skill in job_skills:
        if not isinstance(skill, str):
            logger.debug("Ignoring malformed job skill: %r", skill)
            continue
        if any(skills_match(skill, candidate) for candidate in applicant_skills):
            matched.append(skill)

    return len(matched) / len(job_skills) * SKILL_WEIGHT, matched


def experience_component(applicant: Any) -> tuple[float, float]:
    """Return (experience contribution, total counted years)."""
    total_years = 0.0
    for entry in _as_list(_get(applicant, "experience")):
        try:
            total_years += experience_years(entry)
        except ValidationError as e:
            logger.debug("Skipping experience entry: %s", e)

    contribution = min(total_years / EXPERIENCE_CAP_YEARS, 1.0) * EXPERIENCE_WEIGHT
    return contribution, total_years


def education_component(applicant: Any) -> float:
    entries = _as_list(_get(applicant, "education"))
    return min(len(entries) / EDUCATION_CAP_ENTRIES, 1.0) * EDUCATION_WEIGHT


def score_breakdown(job: Any, applicant: Any) -> FitScore:
    """Compute every component of the fit score for reporting."""
    skills, matched = skill_component(job, applicant)
    experience, years = experience_component(applicant)
    return FitScore(
        skills=skills,
        experience=experience,
        education=education_component(applicant),
        matched_skills=matched,
        experience_years=years,
    )


def compute_score(job: Any, applicant: Any) -> int:
    """
    Score how well an applicant's profile fits a job.

    Works on ORM instances or plain mappings with ``skills``, ``experience``
    and ``education`` fields. The job's skills only affect the skill
    component: a job without skills still scores experience and education.

    Args:
        job: Job (or mapping) with a ``skills`` list
        applicant: User (or mapping) with ``skills``, ``experience`` and
            ``education`` lists

    Returns:
        Integer score in [0, 100]
    """
    return score_breakdown(job, applicant).total


class FitScorer:
    """Default scoring engine used by the application service."""

    def score(self, job: Any, applicant: Any) -> int:
        return compute_score(job, applicant)

    def breakdown(self, job: Any, applicant: Any) -> FitScore:
        return score_breakdown(job, applicant)
