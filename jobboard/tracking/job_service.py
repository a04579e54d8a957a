"""Job posting service."""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import String, cast, or_, select
from sqlalchemy.orm import Session

from jobboard.access.policy import Action, Actor, can_perform
from jobboard.exceptions import PermissionDeniedError, ValidationError
from jobboard.matching.scorer import ScoredJob, rank_jobs_for_applicant
from jobboard.persistence.cascade import execute_cascade, plan_job_deletion
from jobboard.persistence.database import get_or_raise
from jobboard.persistence.models import (
    ExperienceLevel,
    Job,
    JobStatus,
    JobType,
    Role,
    SalaryType,
    User,
    utcnow,
)
from jobboard.tracking.fields import (
    clean_string_list,
    coerce_datetime,
    coerce_enum,
    require_fields,
)
from jobboard.tracking.pagination import Page, escape_like, paginate

logger = logging.getLogger(__name__)


class JobService:
    """Service for posting, browsing and managing jobs."""

    REQUIRED_FIELDS = ("title", "company", "location", "job_type", "description")

    EDITABLE_FIELDS = {
        "title",
        "company",
        "location",
        "job_type",
        "salary",
        "salary_type",
        "description",
        "requirements",
        "responsibilities",
        "skills",
        "experience_level",
        "education_level",
        "status",
        "expires_at",
    }

    # Sort keys accepted by list_jobs
    SORT_OPTIONS = {
        "date-desc": Job.created_at.desc(),
        "date-asc": Job.created_at.asc(),
        "salary-desc": Job.salary.desc(),
        "salary-asc": Job.salary.asc(),
    }

    def __init__(self, session: Session):
        """
        Initialize job service.

        Args:
            session: Database session
        """
        self.session = session

    def create_job(self, actor: Actor, **fields: Any) -> Job:
        """
        Post a new job owned by the actor.

        Args:
            actor: Employer or admin posting the job
            **fields: Job attributes (title, company, location, job_type,
                description required)

        Returns:
            Created Job

        Raises:
            PermissionDeniedError: If the actor may not post jobs
            ValidationError: If a required field is missing or a value is invalid
        """
        if not can_perform(actor, Action.CREATE_JOB):
            raise PermissionDeniedError(Action.CREATE_JOB.value, actor.id if actor else None)

        require_fields(fields, self.REQUIRED_FIELDS)
        unknown = set(fields) - self.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "cannot be set on a job")
        values = self._clean(fields)

        job = Job(owner_id=actor.id, **values)
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)

        logger.info("Job %s posted by %s", job.id, actor.id)
        return job

    def get_job(
        self,
        actor: Optional[Actor],
        job_id: str,
        count_view: bool = True,
    ) -> Job:
        """
        Get a single job, counting the view.

        Inactive, filled and expired jobs are visible only to their owner
        and admins.

        Raises:
            NotFoundError: If the job does not exist
            PermissionDeniedError: If the job is not visible to the actor
        """
        job = get_or_raise(self.session, Job, job_id)
        if not can_perform(actor, Action.READ_JOB, job):
            raise PermissionDeniedError(Action.READ_JOB.value, actor.id if actor else None)

        if count_view:
            job.views = (job.views or 0) + 1
            self.session.commit()
        return job

    def list_jobs(
        self,
        search: Optional[str] = None,
        location: Optional[str] = None,
        job_type: Optional[str] = None,
        experience_level: Optional[str] = None,
        sort: str = "date-desc",
        page: int = 1,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        """
        Browse publicly visible jobs (Active and not expired).

        Args:
            search: Case-insensitive text matched against title, company,
                description and skills
            location: Case-insensitive partial location match
            job_type: Exact job type
            experience_level: Exact experience level
            sort: One of date-desc, date-asc, salary-desc, salary-asc
            page: 1-based page number
            limit: Page size
            now: Reference time for expiry

        Returns:
            Page of Job objects
        """
        if sort not in self.SORT_OPTIONS:
            raise ValidationError("sort", f"must be one of {', '.join(self.SORT_OPTIONS)}")

        stmt = self._visible_jobs(now).order_by(self.SORT_OPTIONS[sort], Job.id)

        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    Job.title.ilike(pattern, escape="\\"),
                    Job.company.ilike(pattern, escape="\\"),
                    Job.description.ilike(pattern, escape="\\"),
                    cast(Job.skills, String).ilike(pattern, escape="\\"),
                )
            )
        if location:
            stmt = stmt.where(Job.location.ilike(f"%{escape_like(location)}%", escape="\\"))
        if job_type:
            stmt = stmt.where(Job.job_type == coerce_enum(JobType, job_type, "job_type"))
        if experience_level:
            stmt = stmt.where(
                Job.experience_level
                == coerce_enum(ExperienceLevel, experience_level, "experience_level")
            )

        return paginate(self.session, stmt, page, limit)

    def list_my_jobs(self, actor: Actor, status: Optional[str] = None) -> list[Job]:
        """
        Get every job the actor posted, newest first.

        Args:
            actor: Employer or admin
            status: Optional status filter, case-insensitive ("active")
        """
        if not can_perform(actor, Action.CREATE_JOB):
            raise PermissionDeniedError("list_my_jobs", actor.id if actor else None)

        stmt = select(Job).where(Job.owner_id == actor.id).order_by(Job.created_at.desc())
        if status:
            stmt = stmt.where(Job.status == coerce_enum(JobStatus, status.capitalize(), "status"))
        return list(self.session.execute(stmt).scalars().all())

    def list_jobs_by_user(
        self,
        actor: Actor,
        user_id: str,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page:
        """Jobs posted by a user; others only see that user's visible jobs."""
        if actor is None:
            raise PermissionDeniedError("list_jobs_by_user", None)

        if actor.is_admin or actor.id == user_id:
            stmt = select(Job)
        else:
            stmt = self._visible_jobs()
        stmt = stmt.where(Job.owner_id == user_id).order_by(Job.created_at.desc(), Job.id)
        return paginate(self.session, stmt, page, limit)

    def update_job(self, actor: Actor, job_id: str, changes: dict) -> Job:
        """
        Update a job's attributes. The owner never changes.

        Raises:
            NotFoundError: If the job does not exist
            PermissionDeniedError: If the actor is neither the owner nor an admin
            ValidationError: If a field is unknown or a value is invalid
        """
        job = get_or_raise(self.session, Job, job_id)
        if not can_perform(actor, Action.UPDATE_JOB, job):
            logger.warning("Denied update of job %s by %s", job_id, actor.id)
            raise PermissionDeniedError(Action.UPDATE_JOB.value, actor.id)

        unknown = set(changes) - self.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "cannot be updated")

        for name, value in self._clean(changes).items():
            setattr(job, name, value)

        self.session.commit()
        self.session.refresh(job)
        return job

    def set_job_status(self, actor: Actor, job_id: str, status: str) -> Job:
        """Mark a job Active, Inactive or Filled."""
        job = get_or_raise(self.session, Job, job_id)
        if not can_perform(actor, Action.UPDATE_JOB_STATUS, job):
            raise PermissionDeniedError(Action.UPDATE_JOB_STATUS.value, actor.id)

        job.status = coerce_enum(JobStatus, status, "status")
        self.session.commit()
        logger.info("Job %s marked %s by %s", job_id, job.status.value, actor.id)
        return job

    def delete_job(self, actor: Actor, job_id: str) -> dict[str, int]:
        """
        Delete a job and every application to it.

        Returns:
            Dictionary with counts of deleted records by type
        """
        job = get_or_raise(self.session, Job, job_id)
        if not can_perform(actor, Action.DELETE_JOB, job):
            raise PermissionDeniedError(Action.DELETE_JOB.value, actor.id)

        counts = execute_cascade(self.session, plan_job_deletion(job))
        self.session.commit()
        return counts

    def match_jobs(self, actor: Actor, limit: int = 10) -> list[ScoredJob]:
        """
        Visible jobs sharing skills with the actor, best fit first.

        Raises:
            PermissionDeniedError: If the actor is not a jobseeker
            ValidationError: If the jobseeker has no skills listed
        """
        if actor is None or actor.role != Role.JOBSEEKER:
            raise PermissionDeniedError("match_jobs", actor.id if actor else None)

        applicant = get_or_raise(self.session, User, actor.id)
        if not applicant.skills:
            raise ValidationError("skills", "user has no skills to match")

        jobs = self.session.execute(self._visible_jobs()).scalars().all()
        return rank_jobs_for_applicant(list(jobs), applicant, limit=limit)

    def _visible_jobs(self, now: Optional[datetime] = None):
        now = now or utcnow()
        # A job without an expiry date never expires
        return (
            select(Job)
            .where(Job.status == JobStatus.ACTIVE)
            .where(or_(Job.expires_at.is_(None), Job.expires_at >= now))
        )

    def _clean(self, fields: dict) -> dict:
        values = dict(fields)
        if "job_type" in values:
            values["job_type"] = coerce_enum(JobType, values["job_type"], "job_type")
        if "salary_type" in values:
            values["salary_type"] = coerce_enum(SalaryType, values["salary_type"], "salary_type")
        if "experience_level" in values:
            values["experience_level"] = coerce_enum(
                ExperienceLevel, values["experience_level"], "experience_level"
            )
        if "status" in values:
            values["status"] = coerce_enum(JobStatus, values["status"], "status")
        if "expires_at" in values:
            values["expires_at"] = coerce_datetime(values["expires_at"], "expires_at")
        for name in ("skills", "requirements", "responsibilities"):
            if name in values:
                values[name] = clean_string_list(values[name], name)
        if values.get("salary") is not None and values["salary"] < 0:
            raise ValidationError("salary", "cannot be negative")
        return values
