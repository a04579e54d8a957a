"""Offset pagination for list queries."""
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from config.settings import settings
from jobboard.exceptions import ValidationError


@dataclass
class Page:
    """One page of results plus the totals a client needs to page through."""

    items: list[Any] = field(default_factory=list)
    page: int = 1
    pages: int = 0
    total: int = 0


def paginate(
    session: Session,
    stmt: Select,
    page: int = 1,
    limit: Optional[int] = None,
) -> Page:
    """
    Run a select for one page.

    Args:
        session: Database session
        stmt: Ordered select returning ORM entities
        page: 1-based page number
        limit: Page size (defaults to settings.default_page_size, capped at
            settings.max_page_size)

    Raises:
        ValidationError: If page or limit is below 1
    """
    limit = settings.default_page_size if limit is None else limit
    if page < 1:
        raise ValidationError("page", "must be at least 1")
    if limit < 1:
        raise ValidationError("limit", "must be at least 1")
    limit = min(limit, settings.max_page_size)

    total = session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    items = session.execute(stmt.offset((page - 1) * limit).limit(limit)).scalars().all()

    return Page(
        items=list(items),
        page=page,
        pages=math.ceil(total / limit),
        total=total,
    )


def escape_like(value: str) -> str:
    """Escape special LIKE characters (%, _) in user input."""
    return value.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")
