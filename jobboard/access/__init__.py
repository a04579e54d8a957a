"""Access control: ownership relations and the per-request policy."""
from jobboard.access.ownership import is_applicant, is_job_owner, owner_of
from jobboard.access.policy import (
    Action,
    Actor,
    RestrictedView,
    can_perform,
    full_profile,
    is_publicly_visible,
    public_profile,
    sanitize_user_update,
)

__all__ = [
    "owner_of",
    "is_applicant",
    "is_job_owner",
    "Action",
    "Actor",
    "RestrictedView",
    "can_perform",
    "full_profile",
    "is_publicly_visible",
    "public_profile",
    "sanitize_user_update",
]
