"""Application lifecycle rules.

Applications move Applied -> Reviewed -> Interviewed -> Rejected/Accepted.
Employers may move an application to any status at any time (including
reverting a rejection), so the transition table below is only enforced
when ``settings.enforce_status_transitions`` is on.

The one invariant always enforced is uniqueness: a jobseeker applies to a
given job at most once.
"""
from typing import Optional

from config.settings import settings
from jobboard.exceptions import (
    DuplicateApplicationError,
    InvalidStatusTransitionError,
    ValidationError,
)
from jobboard.persistence.models import Application, ApplicationStatus, Job, Role, User

STATUS_ORDER = [
    ApplicationStatus.APPLIED,
    ApplicationStatus.REVIEWED,
    ApplicationStatus.INTERVIEWED,
]
TERMINAL_STATUSES = [ApplicationStatus.REJECTED, ApplicationStatus.ACCEPTED]

_DECISIONS = {ApplicationStatus.REJECTED, ApplicationStatus.ACCEPTED}

ALLOWED_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: {ApplicationStatus.REVIEWED} | _DECISIONS,
    ApplicationStatus.REVIEWED: {ApplicationStatus.INTERVIEWED} | _DECISIONS,
    ApplicationStatus.INTERVIEWED: set(_DECISIONS),
    # Employers reopen rejected candidates
    ApplicationStatus.REJECTED: {ApplicationStatus.REVIEWED},
    ApplicationStatus.ACCEPTED: set(),
}


def parse_status(value: str) -> ApplicationStatus:
    """Coerce a raw status value to the enum.

    Raises:
        ValidationError: If the value is not one of the known statuses
    """
    try:
        return ApplicationStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError("status", f"{value!r} must be one of {valid}") from None


def is_terminal(status: ApplicationStatus) -> bool:
    return ApplicationStatus(status) in TERMINAL_STATUSES


def validate_transition(
    old_status: ApplicationStatus,
    new_status: str,
    enforce: Optional[bool] = None,
) -> ApplicationStatus:
    """
    Check a status change and return the parsed target status.

    Args:
        old_status: Current status
        new_status: Requested status (enum member or raw string)
        enforce: Apply ALLOWED_TRANSITIONS (defaults to the configured setting)

    Raises:
        ValidationError: If new_status is not a known status
        InvalidStatusTransitionError: If enforcing and the move is not allowed
    """
    target = parse_status(new_status)
    if enforce is None:
        enforce = settings.enforce_status_transitions

    current = ApplicationStatus(old_status)
    if enforce and target != current and target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, target.value)
    return target


def assert_creatable(
    job: Job,
    applicant: User,
    existing_application: Optional[Application] = None,
) -> None:
    """
    Check the preconditions for a new application.

    ``existing_application`` is whatever the store holds for the
    (job, applicant) pair. The store's unique constraint backs this check
    against concurrent submissions.

    Raises:
        DuplicateApplicationError: If an application already exists
        ValidationError: If the applicant is not a jobseeker
    """
    if existing_application is not None:
        raise DuplicateApplicationError(job.id, applicant.id)
    if applicant.role != Role.JOBSEEKER:
        raise ValidationError("applicant", "only jobseekers can apply for jobs")
