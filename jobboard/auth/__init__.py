"""Account registration and login."""
from jobboard.auth.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidRoleError,
    WeakPasswordError,
)
from jobboard.auth.service import AuthService, hash_password, verify_password

__all__ = [
    "AuthService",
    "hash_password",
    "verify_password",
    "AuthenticationError",
    "DuplicateEmailError",
    "WeakPasswordError",
    "InvalidEmailError",
    "InvalidRoleError",
    "InvalidCredentialsError",
]
