"""Platform-wide analytics for administrators."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from jobboard.persistence.models import Application, Job, JobStatus, User, utcnow


@dataclass
class PlatformSummary:
    """Headline counts for the admin dashboard."""

    users_by_role: dict[str, int] = field(default_factory=dict)
    new_users: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    applications_by_status: dict[str, int] = field(default_factory=dict)


class PlatformAnalytics:
    """Aggregate counts across all accounts, jobs and applications."""

    NEW_USER_WINDOW_DAYS = 30

    def __init__(self, session: Session):
        """
        Initialize platform analytics.

        Args:
            session: Database session
        """
        self.session = session

    def get_summary(self, now: Optional[datetime] = None) -> PlatformSummary:
        """
        Compute the dashboard summary.

        Args:
            now: Reference time for the new-user window and job expiry

        Returns:
            PlatformSummary
        """
        now = now or utcnow()
        return PlatformSummary(
            users_by_role=self.get_users_by_role(),
            new_users=self.get_new_user_count(now - timedelta(days=self.NEW_USER_WINDOW_DAYS)),
            active_jobs=self.get_active_job_count(now),
            total_applications=self.session.execute(
                select(func.count(Application.id))
            ).scalar_one(),
            applications_by_status=self.get_applications_by_status(),
        )

    def get_users_by_role(self) -> dict[str, int]:
        stmt = select(User.role, func.count(User.id)).group_by(User.role)
        return {role.value: count for role, count in self.session.execute(stmt).all()}

    def get_new_user_count(self, since: datetime) -> int:
        stmt = select(func.count(User.id)).where(User.created_at >= since)
        return self.session.execute(stmt).scalar_one()

    def get_active_job_count(self, now: datetime) -> int:
        """Jobs that are Active and not yet expired."""
        stmt = (
            select(func.count(Job.id))
            .where(Job.status == JobStatus.ACTIVE)
            .where(or_(Job.expires_at.is_(None), Job.expires_at >= now))
        )
        return self.session.execute(stmt).scalar_one()

    def get_applications_by_status(self) -> dict[str, int]:
        stmt = select(Application.status, func.count(Application.id)).group_by(
            Application.status
        )
        return {status.value: count for status, count in self.session.execute(stmt).all()}
