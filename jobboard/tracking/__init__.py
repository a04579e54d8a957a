"""Services for jobs, applications and accounts."""
from .application_service import ApplicationService
from .job_service import JobService
from .user_service import UserService

__all__ = ["ApplicationService", "JobService", "UserService"]
