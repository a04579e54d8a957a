"""Ownership relations used by the access policy.

A job is owned by the employer who posted it. An application has two
distinct relations: its applicant, and (through its job) the job owner.
The policy consults each relation separately.
"""
from typing import Optional, Union

from jobboard.persistence.models import Application, Job


def owner_of(resource: Union[Job, Application]) -> Optional[str]:
    """Return the user id that owns a job, or the owner of an application's job."""
    if isinstance(resource, Job):
        return resource.owner_id
    if isinstance(resource, Application):
        job = resource.job
        return job.owner_id if job is not None else None
    raise TypeError(f"No owner relation for {type(resource).__name__}")


def is_applicant(application: Application, user_id: Optional[str]) -> bool:
    """True when ``user_id`` submitted the application."""
    return user_id is not None and application.applicant_id == user_id


def is_job_owner(resource: Union[Job, Application], user_id: Optional[str]) -> bool:
    """True when ``user_id`` posted the job (or the application's job)."""
    if user_id is None:
        return False
    owner_id = owner_of(resource)
    return owner_id is not None and owner_id == user_id
