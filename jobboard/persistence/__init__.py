"""Database persistence layer."""
from .cascade import CascadePlan, execute_cascade, plan_job_deletion, plan_user_deletion
from .database import get_session, init_db
from .models import (
    Application,
    ApplicationNote,
    ApplicationStatus,
    Base,
    Education,
    Experience,
    ExperienceLevel,
    Job,
    JobStatus,
    JobType,
    Role,
    SalaryType,
    User,
)

__all__ = [
    "Base",
    "User",
    "Experience",
    "Education",
    "Job",
    "Application",
    "ApplicationNote",
    "Role",
    "JobStatus",
    "JobType",
    "SalaryType",
    "ExperienceLevel",
    "ApplicationStatus",
    "CascadePlan",
    "plan_job_deletion",
    "plan_user_deletion",
    "execute_cascade",
    "init_db",
    "get_session",
]
