"""Domain exceptions for the job board."""


class JobBoardError(Exception):
    """Base exception for job board errors."""

    pass


class ValidationError(JobBoardError):
    """Raised when input to a service or the scorer is malformed."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class NotFoundError(JobBoardError):
    """Raised when a job, application or user does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")


class DuplicateApplicationError(JobBoardError):
    """Raised when a jobseeker applies twice to the same job."""

    def __init__(self, job_id: str, applicant_id: str):
        self.job_id = job_id
        self.applicant_id = applicant_id
        super().__init__(
            f"Applicant {applicant_id} has already applied for job {job_id}"
        )


class PermissionDeniedError(JobBoardError):
    """Raised by services when the access policy refuses an action."""

    def __init__(self, action: str, actor_id: str | None):
        self.action = action
        self.actor_id = actor_id
        super().__init__(f"Not authorized to {action} (actor: {actor_id or 'anonymous'})")


class InvalidStatusTransitionError(JobBoardError):
    """Raised when an application status change is not in the transition table."""

    def __init__(self, old_status: str, new_status: str):
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(f"Cannot move application from {old_status} to {new_status}")
