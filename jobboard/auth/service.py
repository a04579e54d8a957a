"""Account registration and login."""
import logging
import re
from typing import Any, Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from config.settings import settings
from jobboard.auth.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidRoleError,
    WeakPasswordError,
)
from jobboard.persistence.models import Role, User

logger = logging.getLogger(__name__)

# Email validation regex
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Roles a visitor may pick at sign-up; admins are created by other admins
SELF_SERVICE_ROLES = (Role.JOBSEEKER, Role.EMPLOYER)

# Profile fields accepted at registration
PROFILE_FIELDS = {
    "skills",
    "resume",
    "profile_picture",
    "company_name",
    "company_description",
    "company_logo",
    "company_website",
}


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        hashed: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class AuthService:
    """
    Account service.

    Handles:
    - Registration as a jobseeker or employer
    - Login with email and password

    Token issuance is left to the web layer.
    """

    def __init__(self, session: Session):
        """
        Initialize auth service with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str = Role.JOBSEEKER,
        **profile: Any,
    ) -> User:
        """
        Register a new account.

        Args:
            name: Display name
            email: Email address (stored lowercased)
            password: Plain text password (will be hashed)
            role: "jobseeker" (default) or "employer"
            **profile: Optional profile fields (skills, company_name, ...)

        Returns:
            Created User object

        Raises:
            InvalidEmailError: If email format is invalid
            InvalidRoleError: If the role is unknown or admin
            DuplicateEmailError: If email already exists
            WeakPasswordError: If password doesn't meet requirements
        """
        if not self._is_valid_email(email):
            raise InvalidEmailError(email)

        allowed = [r.value for r in SELF_SERVICE_ROLES]
        try:
            role = Role(role)
        except ValueError:
            raise InvalidRoleError(str(role), allowed) from None
        if role not in SELF_SERVICE_ROLES:
            raise InvalidRoleError(role.value, allowed)

        self._validate_password(password)

        if self._get_user_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = User(
            name=name.strip(),
            email=email.lower().strip(),
            password_hash=hash_password(password),
            role=role,
            **{k: v for k, v in profile.items() if k in PROFILE_FIELDS},
        )
        self.session.add(user)
        self.session.commit()

        logger.info("Registered %s account %s", role.value, user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate a user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If email or password is incorrect
        """
        user = self._get_user_by_email(email)
        if user is None:
            raise InvalidCredentialsError()

        if user.password_hash is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return user

    def _is_valid_email(self, email: str) -> bool:
        """Check if email format is valid."""
        if not email or not isinstance(email, str):
            return False
        return EMAIL_REGEX.match(email.strip()) is not None

    def _validate_password(self, password: str) -> None:
        """
        Validate password meets the configured minimum length.

        Raises:
            WeakPasswordError: If password doesn't meet requirements
        """
        if not password or len(password) < settings.min_password_length:
            raise WeakPasswordError(settings.min_password_length)

    def _get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        stmt = select(User).where(User.email == email.lower().strip())
        return self.session.execute(stmt).scalar_one_or_none()
