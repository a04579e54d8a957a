"""Cascading deletes for jobs and accounts.

Planning and execution are separate: ``plan_*`` works out which records
depend on the one being deleted, ``execute_cascade`` removes them in
dependency order so no application is left pointing at a deleted job.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from jobboard.persistence.models import (
    Application,
    ApplicationNote,
    Education,
    Experience,
    Job,
    User,
)

logger = logging.getLogger(__name__)


@dataclass
class CascadePlan:
    """Ids of every record removed by one delete."""

    user_ids: list[str] = field(default_factory=list)
    job_ids: list[str] = field(default_factory=list)
    application_ids: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.user_ids) + len(self.job_ids) + len(self.application_ids)


def plan_job_deletion(job: Job) -> CascadePlan:
    """A job takes its applications with it."""
    return CascadePlan(
        job_ids=[job.id],
        application_ids=[a.id for a in job.applications],
    )


def plan_user_deletion(user: User) -> CascadePlan:
    """
    Work out what goes when an account is deleted.

    Employers lose their jobs and every application to those jobs;
    jobseekers lose the applications they submitted. Both relations are
    followed for every role, so an admin who posted jobs leaves no orphans.
    """
    plan = CascadePlan(user_ids=[user.id])
    for job in user.jobs:
        plan.job_ids.append(job.id)
        plan.application_ids.extend(a.id for a in job.applications)

    seen = set(plan.application_ids)
    for application in user.applications:
        if application.id not in seen:
            plan.application_ids.append(application.id)
            seen.add(application.id)
    return plan


def execute_cascade(session: Session, plan: CascadePlan) -> dict[str, int]:
    """
    Delete everything in the plan, children first.

    The caller owns the transaction and commits.

    Returns:
        Dictionary with counts of deleted records by type
    """
    counts = {"applications": 0, "jobs": 0, "users": 0}

    if plan.application_ids:
        session.execute(
            delete(ApplicationNote).where(ApplicationNote.application_id.in_(plan.application_ids))
        )
        result = session.execute(
            delete(Application).where(Application.id.in_(plan.application_ids))
        )
        counts["applications"] = result.rowcount

    if plan.job_ids:
        result = session.execute(delete(Job).where(Job.id.in_(plan.job_ids)))
        counts["jobs"] = result.rowcount

    if plan.user_ids:
        # Notes written by a removed user stay on surviving applications
        session.execute(
            update(ApplicationNote)
            .where(ApplicationNote.author_id.in_(plan.user_ids))
            .values(author_id=None)
        )
        session.execute(delete(Experience).where(Experience.user_id.in_(plan.user_ids)))
        session.execute(delete(Education).where(Education.user_id.in_(plan.user_ids)))
        result = session.execute(delete(User).where(User.id.in_(plan.user_ids)))
        counts["users"] = result.rowcount

    logger.info(
        "Cascade removed %d users, %d jobs, %d applications",
        counts["users"],
        counts["jobs"],
        counts["applications"],
    )
    return counts
