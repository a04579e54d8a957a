"""User account service."""
import logging
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from jobboard.access.policy import (
    Action,
    Actor,
    RestrictedView,
    can_perform,
    full_profile,
    public_profile,
    sanitize_user_update,
)
from jobboard.analytics.platform import PlatformAnalytics, PlatformSummary
from jobboard.auth.exceptions import DuplicateEmailError, InvalidEmailError
from jobboard.auth.service import EMAIL_REGEX
from jobboard.exceptions import PermissionDeniedError, ValidationError
from jobboard.persistence.cascade import execute_cascade, plan_user_deletion
from jobboard.persistence.database import get_or_raise
from jobboard.persistence.models import Role, User
from jobboard.tracking.fields import (
    build_education,
    build_experience,
    clean_string_list,
    coerce_enum,
)
from jobboard.tracking.pagination import Page, escape_like, paginate

logger = logging.getLogger(__name__)


class UserService:
    """Service for viewing, editing and removing accounts."""

    EDITABLE_FIELDS = {
        "name",
        "email",
        "role",
        "resume",
        "skills",
        "experience",
        "education",
        "profile_picture",
        "company_name",
        "company_description",
        "company_logo",
        "company_website",
    }

    def __init__(self, session: Session):
        """
        Initialize user service.

        Args:
            session: Database session
        """
        self.session = session

    def get_user(self, actor: Actor, user_id: str) -> dict:
        """
        Get an account as the actor is allowed to see it.

        Admins and the user themself get the full record; other signed-in
        users get the public projection.

        Raises:
            NotFoundError: If the user does not exist
            PermissionDeniedError: If the request is anonymous
        """
        user = get_or_raise(self.session, User, user_id)
        decision = can_perform(actor, Action.READ_USER, user)

        if decision is RestrictedView.PUBLIC_PROFILE:
            return public_profile(user)
        if decision:
            return full_profile(user)
        raise PermissionDeniedError(Action.READ_USER.value, actor.id if actor else None)

    def list_users(
        self,
        actor: Actor,
        role: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page:
        """
        List accounts for administration, newest first.

        Args:
            actor: Must be an admin
            role: Optional role filter
            search: Case-insensitive match on name or email
        """
        if not can_perform(actor, Action.LIST_USERS):
            raise PermissionDeniedError(Action.LIST_USERS.value, actor.id if actor else None)

        stmt = select(User).order_by(User.created_at.desc(), User.id)
        if role:
            stmt = stmt.where(User.role == coerce_enum(Role, role, "role"))
        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                )
            )
        return paginate(self.session, stmt, page, limit)

    def update_user(self, actor: Actor, user_id: str, changes: dict[str, Any]) -> User:
        """
        Update an account.

        Non-admins may edit only their own record and never their role; a
        role in their changes is dropped rather than refused.

        Raises:
            NotFoundError: If the user does not exist
            PermissionDeniedError: If the actor is neither the user nor an admin
            ValidationError: If a field is unknown or a value is invalid
        """
        user = get_or_raise(self.session, User, user_id)
        if not can_perform(actor, Action.UPDATE_USER, user):
            logger.warning("Denied update of user %s by %s", user_id, actor.id)
            raise PermissionDeniedError(Action.UPDATE_USER.value, actor.id)

        changes = sanitize_user_update(actor, user, changes)
        unknown = set(changes) - self.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "cannot be updated")

        for name, value in changes.items():
            if name == "role":
                value = coerce_enum(Role, value, "role")
            elif name == "email":
                value = self._check_email(user, value)
            elif name == "skills":
                value = clean_string_list(value, "skills")
            elif name == "experience":
                value = build_experience(value)
            elif name == "education":
                value = build_education(value)
            setattr(user, name, value)

        self.session.commit()
        self.session.refresh(user)
        return user

    def update_skills(self, actor: Actor, user_id: str, skills: list[str]) -> User:
        """Replace a jobseeker's skills. Only the jobseeker themself may do this."""
        user = get_or_raise(self.session, User, user_id)
        if actor is None or actor.role != Role.JOBSEEKER or actor.id != user.id:
            raise PermissionDeniedError("update_skills", actor.id if actor else None)

        user.skills = clean_string_list(skills, "skills")
        self.session.commit()
        return user

    def delete_user(self, actor: Actor, user_id: str) -> dict[str, int]:
        """
        Delete an account with everything that depends on it.

        Returns:
            Dictionary with counts of deleted records by type
        """
        user = get_or_raise(self.session, User, user_id)
        if not can_perform(actor, Action.DELETE_USER, user):
            raise PermissionDeniedError(Action.DELETE_USER.value, actor.id)

        plan = plan_user_deletion(user)
        counts = execute_cascade(self.session, plan)
        self.session.commit()

        logger.info("User %s deleted by %s", user_id, actor.id)
        return counts

    def get_analytics(self, actor: Actor) -> PlatformSummary:
        """Platform-wide counts for the admin dashboard."""
        if not can_perform(actor, Action.VIEW_ANALYTICS):
            raise PermissionDeniedError(Action.VIEW_ANALYTICS.value, actor.id if actor else None)
        return PlatformAnalytics(self.session).get_summary()

    def _check_email(self, user: User, email: str) -> str:
        if not isinstance(email, str) or not EMAIL_REGEX.match(email.strip()):
            raise InvalidEmailError(str(email))
        email = email.lower().strip()
        stmt = select(User.id).where(User.email == email, User.id != user.id)
        if self.session.execute(stmt).first() is not None:
            raise DuplicateEmailError(email)
        return email
