"""Resource-scoped access policy.

``can_perform`` answers "may this actor do this to that record" from the
actor's role and the ownership relations of the record. It never raises
for a refusal and never touches the database: callers load the records
and translate ``False`` into their own access-denied response.

Rules are evaluated in precedence order, first match wins:

1. Admins may do anything.
2. Each action then has a single rule in ``_RULES``.

Reading another user's profile is not refused but shaped: the caller gets
``RestrictedView.PUBLIC_PROFILE`` and should return ``public_profile(user)``.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Union

from jobboard.access.ownership import is_applicant, is_job_owner
from jobboard.persistence.models import (
    Application,
    Job,
    JobStatus,
    Role,
    User,
    as_utc,
    utcnow,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated user initiating a request."""

    id: str
    role: Role

    def __post_init__(self):
        # Accept plain strings ("employer") from token payloads
        object.__setattr__(self, "role", Role(self.role))

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=user.role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Action(str, Enum):
    """Every action the policy can decide on."""

    CREATE_JOB = "create_job"
    READ_JOB = "read_job"
    LIST_JOBS = "list_jobs"
    UPDATE_JOB = "update_job"
    DELETE_JOB = "delete_job"
    UPDATE_JOB_STATUS = "update_job_status"
    CREATE_APPLICATION = "create_application"
    READ_APPLICATION = "read_application"
    UPDATE_APPLICATION_STATUS = "update_application_status"
    ADD_APPLICATION_NOTE = "add_application_note"
    READ_USER = "read_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    LIST_USERS = "list_users"
    VIEW_ANALYTICS = "view_analytics"


class RestrictedView(str, Enum):
    """Shaped outcome: the actor may see a reduced projection of the record."""

    PUBLIC_PROFILE = "public_profile"


Decision = Union[bool, RestrictedView]

# Fields any signed-in user may see on someone else's account
PUBLIC_PROFILE_FIELDS = ("id", "name", "email", "role", "company_name", "company_logo")

# Fields nobody may change through a profile update
PROTECTED_USER_FIELDS = frozenset({"id", "created_at", "password_hash"})

FULL_PROFILE_FIELDS = (
    "id",
    "name",
    "email",
    "role",
    "resume",
    "skills",
    "profile_picture",
    "company_name",
    "company_description",
    "company_logo",
    "company_website",
    "created_at",
)


def is_publicly_visible(job: Job, now: Optional[datetime] = None) -> bool:
    """True when the job is Active and has not expired."""
    if job.status != JobStatus.ACTIVE:
        return False
    expires_at = as_utc(job.expires_at)
    if expires_at is None:
        return True
    return expires_at >= as_utc(now or utcnow())


def _is_owning_employer(actor: Optional[Actor], job: Job) -> bool:
    return (
        actor is not None
        and actor.role == Role.EMPLOYER
        and is_job_owner(job, actor.id)
    )


def _create_job(actor, resource, now) -> Decision:
    return actor is not None and actor.role == Role.EMPLOYER


def _read_job(actor, resource, now) -> Decision:
    if not isinstance(resource, Job):
        return False
    if is_publicly_visible(resource, now):
        return True
    return actor is not None and is_job_owner(resource, actor.id)


def _list_jobs(actor, resource, now) -> Decision:
    # Listing itself is public; each listed job is then filtered by _read_job
    if resource is None:
        return True
    return _read_job(actor, resource, now)


def _manage_job(actor, resource, now) -> Decision:
    return isinstance(resource, Job) and _is_owning_employer(actor, resource)


def _create_application(actor, resource, now) -> Decision:
    if actor is None or actor.role != Role.JOBSEEKER:
        return False
    return isinstance(resource, Job) and is_publicly_visible(resource, now)


def _read_application(actor, resource, now) -> Decision:
    if actor is None or not isinstance(resource, Application):
        return False
    return is_applicant(resource, actor.id) or is_job_owner(resource, actor.id)


def _manage_application(actor, resource, now) -> Decision:
    # The applicant never manages their own application
    if actor is None or not isinstance(resource, Application):
        return False
    return actor.role == Role.EMPLOYER and is_job_owner(resource, actor.id)


def _read_user(actor, resource, now) -> Decision:
    if actor is None or not isinstance(resource, User):
        return False
    if actor.id == resource.id:
        return True
    return RestrictedView.PUBLIC_PROFILE


def _update_user(actor, resource, now) -> Decision:
    return actor is not None and isinstance(resource, User) and actor.id == resource.id


def _admin_only(actor, resource, now) -> Decision:
    return False


_RULES: dict[Action, Callable[[Optional[Actor], Any, datetime], Decision]] = {
    Action.CREATE_JOB: _create_job,
    Action.READ_JOB: _read_job,
    Action.LIST_JOBS: _list_jobs,
    Action.UPDATE_JOB: _manage_job,
    Action.DELETE_JOB: _manage_job,
    Action.UPDATE_JOB_STATUS: _manage_job,
    Action.CREATE_APPLICATION: _create_application,
    Action.READ_APPLICATION: _read_application,
    Action.UPDATE_APPLICATION_STATUS: _manage_application,
    Action.ADD_APPLICATION_NOTE: _manage_application,
    Action.READ_USER: _read_user,
    Action.UPDATE_USER: _update_user,
    Action.DELETE_USER: _admin_only,
    Action.LIST_USERS: _admin_only,
    Action.VIEW_ANALYTICS: _admin_only,
}

_missing_rules = set(Action) - set(_RULES)
if _missing_rules:
    raise RuntimeError(f"No access rule for: {sorted(a.value for a in _missing_rules)}")


def can_perform(
    actor: Optional[Actor],
    action: Action,
    resource: Any = None,
    now: Optional[datetime] = None,
) -> Decision:
    """
    Decide whether an actor may perform an action on a resource.

    Args:
        actor: Authenticated actor, or None for anonymous requests
        action: Action being attempted
        resource: Target Job, Application or User (None for creation/listing)
        now: Reference time for job expiry (defaults to current UTC time)

    Returns:
        True when allowed, False when refused, or
        RestrictedView.PUBLIC_PROFILE when reading another user's account
    """
    action = Action(action)
    if actor is not None and actor.is_admin:
        return True
    return _RULES[action](actor, resource, now or utcnow())


def public_profile(user: User) -> dict:
    """Reduced projection of an account shown to other users."""
    return {name: _serialize(getattr(user, name)) for name in PUBLIC_PROFILE_FIELDS}


def full_profile(user: User) -> dict:
    """Complete account record without credentials."""
    profile = {name: _serialize(getattr(user, name)) for name in FULL_PROFILE_FIELDS}
    profile["experience"] = [
        {
            "company": e.company,
            "position": e.position,
            "start_date": e.start_date,
            "end_date": e.end_date,
            "description": e.description,
        }
        for e in user.experience
    ]
    profile["education"] = [
        {
            "institution": e.institution,
            "degree": e.degree,
            "field": e.field,
            "start_year": e.start_year,
            "end_year": e.end_year,
        }
        for e in user.education
    ]
    return profile


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def sanitize_user_update(actor: Actor, target: User, changes: dict) -> dict:
    """
    Drop fields the actor may not change on the target account.

    Identity and credential fields are never writable here. Only admins may
    change ``role``, even on their own record.

    Returns:
        A new dict holding only the permitted changes
    """
    allowed = {k: v for k, v in changes.items() if k not in PROTECTED_USER_FIELDS}
    if "role" in allowed and not actor.is_admin:
        logger.warning("Ignoring role change on %s requested by %s", target.id, actor.id)
        del allowed["role"]
    return allowed
