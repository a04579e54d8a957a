"""Application tracking service."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import settings
from jobboard.access.policy import Action, Actor, can_perform
from jobboard.exceptions import (
    DuplicateApplicationError,
    PermissionDeniedError,
    ValidationError,
)
from jobboard.matching.fit_scorer import FitScorer
from jobboard.matching.scorer import rank_applications
from jobboard.matching.scorer_protocol import Scorer
from jobboard.matching.scoring_queue import ScoringQueue, scoring_queue
from jobboard.persistence.database import get_or_raise
from jobboard.persistence.models import (
    Application,
    ApplicationNote,
    ApplicationStatus,
    Job,
    Role,
    User,
)
from jobboard.tracking.lifecycle import assert_creatable, validate_transition
from jobboard.tracking.pagination import Page, paginate

logger = logging.getLogger(__name__)


class ApplicationService:
    """Service for submitting and managing job applications."""

    def __init__(
        self,
        session: Session,
        scorer: Optional[Scorer] = None,
        queue: Optional[ScoringQueue] = None,
        score_mode: Optional[str] = None,
    ):
        """
        Initialize application service.

        Args:
            session: Database session
            scorer: Fit scoring engine (defaults to FitScorer)
            queue: Queue used when scoring is deferred
            score_mode: "inline" or "deferred" (defaults to settings.score_mode)
        """
        self.session = session
        self.scorer = scorer or FitScorer()
        self.queue = queue if queue is not None else scoring_queue
        self.score_mode = score_mode or settings.score_mode

    def submit_application(
        self,
        actor: Actor,
        job_id: str,
        resume: Optional[str] = None,
        cover_letter: Optional[str] = None,
    ) -> Application:
        """
        Submit the actor's application to a job and score it.

        A second submission for the same job is refused before any access
        check runs, and the store's unique constraint catches concurrent
        duplicates.

        Args:
            actor: Jobseeker applying
            job_id: Job applied for
            resume: Uploaded resume path (defaults to the profile resume)
            cover_letter: Optional cover letter text

        Returns:
            Created Application

        Raises:
            NotFoundError: If the job or applicant does not exist
            DuplicateApplicationError: If the actor already applied
            PermissionDeniedError: If the actor may not apply to this job
            ValidationError: If no resume is available
        """
        job = get_or_raise(self.session, Job, job_id)
        applicant = get_or_raise(self.session, User, actor.id)

        assert_creatable(job, applicant, self._find_existing(job.id, applicant.id))

        if not can_perform(actor, Action.CREATE_APPLICATION, job):
            logger.warning("Denied application to job %s by %s", job_id, actor.id)
            raise PermissionDeniedError(Action.CREATE_APPLICATION.value, actor.id)

        resume = resume or applicant.resume
        if not resume:
            raise ValidationError("resume", "please upload a resume")

        application = Application(
            job=job,
            applicant=applicant,
            resume=resume,
            cover_letter=cover_letter,
            score=0,
        )
        self.session.add(application)

        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            logger.info("Concurrent duplicate application to %s by %s", job_id, actor.id)
            raise DuplicateApplicationError(job_id, actor.id) from None

        if self.score_mode == "deferred":
            self.queue.enqueue(application)
        else:
            application.score = self.scorer.score(job, applicant)
        self.session.commit()

        self.session.refresh(application)
        logger.info(
            "Application %s submitted to job %s (score %d)",
            application.id,
            job_id,
            application.score,
        )
        return application

    def get_application(self, actor: Actor, application_id: str) -> Application:
        """
        Get an application visible to the actor.

        Raises:
            NotFoundError: If the application does not exist
            PermissionDeniedError: If the actor is neither applicant, job owner nor admin
        """
        application = get_or_raise(self.session, Application, application_id)
        if not can_perform(actor, Action.READ_APPLICATION, application):
            raise PermissionDeniedError(Action.READ_APPLICATION.value, actor.id if actor else None)
        return application

    def list_applications(
        self,
        actor: Actor,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page:
        """
        List applications the actor can see, newest first.

        Jobseekers see their own, employers see those for their jobs and
        admins see everything.
        """
        stmt = select(Application).order_by(Application.created_at.desc(), Application.id)

        if actor.role == Role.JOBSEEKER:
            stmt = stmt.where(Application.applicant_id == actor.id)
        elif actor.role == Role.EMPLOYER:
            owned_jobs = select(Job.id).where(Job.owner_id == actor.id)
            stmt = stmt.where(Application.job_id.in_(owned_jobs))

        return paginate(self.session, stmt, page, limit)

    def update_status(
        self,
        actor: Actor,
        application_id: str,
        new_status: str,
    ) -> Application:
        """
        Move an application to a new status.

        Raises:
            NotFoundError: If the application does not exist
            PermissionDeniedError: If the actor does not own the job (admins excepted)
            ValidationError: If the status is unknown
            InvalidStatusTransitionError: If transitions are enforced and
                the move is not allowed
        """
        application = get_or_raise(self.session, Application, application_id)
        if not can_perform(actor, Action.UPDATE_APPLICATION_STATUS, application):
            logger.warning("Denied status change on %s by %s", application_id, actor.id)
            raise PermissionDeniedError(Action.UPDATE_APPLICATION_STATUS.value, actor.id)

        old_status = ApplicationStatus(application.status)
        target = validate_transition(old_status, new_status)

        # Skip if already at the same status
        if old_status == target:
            return application

        application.status = target
        application.updated_at = datetime.now(timezone.utc)
        self.session.commit()
        self.session.refresh(application)

        logger.info(
            "Application %s moved %s -> %s by %s",
            application_id,
            old_status.value,
            target.value,
            actor.id,
        )
        return application

    def add_note(self, actor: Actor, application_id: str, content: str) -> ApplicationNote:
        """
        Append a note to an application. Notes are never removed.

        Raises:
            NotFoundError: If the application does not exist
            PermissionDeniedError: If the actor does not own the job (admins excepted)
            ValidationError: If the note is empty
        """
        application = get_or_raise(self.session, Application, application_id)
        if not can_perform(actor, Action.ADD_APPLICATION_NOTE, application):
            raise PermissionDeniedError(Action.ADD_APPLICATION_NOTE.value, actor.id)

        if not content or not content.strip():
            raise ValidationError("content", "note cannot be empty")

        note = ApplicationNote(author_id=actor.id, content=content.strip())
        application.notes.append(note)
        application.updated_at = datetime.now(timezone.utc)
        self.session.commit()
        self.session.refresh(note)
        return note

    def rescore_application(self, actor: Actor, application_id: str) -> Application:
        """Recompute an application's score from the current job and profile."""
        application = get_or_raise(self.session, Application, application_id)
        if not can_perform(actor, Action.UPDATE_APPLICATION_STATUS, application):
            raise PermissionDeniedError("rescore_application", actor.id)

        application.score = self.scorer.score(application.job, application.applicant)
        application.score_pending = False
        self.session.commit()
        return application

    def rank_applications_for_job(self, actor: Actor, job_id: str) -> list[Application]:
        """Applications to a job ordered by score, for the job owner or an admin."""
        job = get_or_raise(self.session, Job, job_id)
        if not can_perform(actor, Action.UPDATE_JOB, job):
            raise PermissionDeniedError("rank_applications", actor.id)
        return rank_applications(list(job.applications))

    def _find_existing(self, job_id: str, applicant_id: str) -> Optional[Application]:
        stmt = select(Application).where(
            Application.job_id == job_id,
            Application.applicant_id == applicant_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()
