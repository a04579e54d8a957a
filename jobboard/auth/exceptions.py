"""Registration and login errors."""
from typing import Iterable

from jobboard.exceptions import JobBoardError


class AuthenticationError(JobBoardError):
    """Base class for registration and login failures."""

    pass


class DuplicateEmailError(AuthenticationError):
    """Raised when another account already uses the email (case-insensitive)."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An account with {email} already exists")


class WeakPasswordError(AuthenticationError):
    """Raised when a password is shorter than the configured minimum."""

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(f"Password must be at least {min_length} characters")


class InvalidEmailError(AuthenticationError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Not a valid email address: {email}")


class InvalidRoleError(AuthenticationError):
    """Raised for an unknown role, or one that cannot be picked at sign-up."""

    def __init__(self, role: str, allowed: Iterable[str] = ()):
        self.role = role
        self.allowed = tuple(allowed)
        message = f"Cannot register as {role!r}"
        if self.allowed:
            message += f" (choose {' or '.join(self.allowed)})"
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Raised on login with an unknown email or a wrong password."""

    def __init__(self):
        super().__init__("Invalid credentials")
