"""Orphaned record sweep.

Cascading deletes keep the tables consistent; this catches rows left
behind by writes that bypassed them (manual SQL, SQLite without foreign
key enforcement).
"""
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from jobboard.persistence.models import (
    Application,
    ApplicationNote,
    Education,
    Experience,
    Job,
    User,
)

logger = logging.getLogger(__name__)


def delete_orphaned_applications(session: Session) -> int:
    """Remove applications whose job or applicant no longer exists."""
    job_ids = select(Job.id)
    user_ids = select(User.id)
    orphan_ids = select(Application.id).where(
        Application.job_id.notin_(job_ids) | Application.applicant_id.notin_(user_ids)
    )
    ids = list(session.execute(orphan_ids).scalars().all())
    if not ids:
        return 0

    session.execute(delete(ApplicationNote).where(ApplicationNote.application_id.in_(ids)))
    result = session.execute(delete(Application).where(Application.id.in_(ids)))
    return result.rowcount


def delete_orphaned_jobs(session: Session) -> int:
    """Remove jobs whose owner no longer exists, with their applications."""
    ids = list(
        session.execute(select(Job.id).where(Job.owner_id.notin_(select(User.id))))
        .scalars()
        .all()
    )
    if not ids:
        return 0

    app_ids = select(Application.id).where(Application.job_id.in_(ids))
    session.execute(delete(ApplicationNote).where(ApplicationNote.application_id.in_(app_ids)))
    session.execute(delete(Application).where(Application.job_id.in_(ids)))
    result = session.execute(delete(Job).where(Job.id.in_(ids)))
    return result.rowcount


def delete_orphaned_profile_entries(session: Session) -> int:
    """Remove experience and education rows whose user no longer exists."""
    user_ids = select(User.id)
    count = session.execute(delete(Experience).where(Experience.user_id.notin_(user_ids))).rowcount
    count += session.execute(delete(Education).where(Education.user_id.notin_(user_ids))).rowcount
    return count


def cleanup_orphaned_records(session: Session) -> dict[str, int]:
    """
    Run every sweep and commit.

    Returns:
        Dictionary with counts of each cleanup operation
    """
    jobs = delete_orphaned_jobs(session)
    applications = delete_orphaned_applications(session)

    notes = session.execute(
        delete(ApplicationNote).where(
            ApplicationNote.application_id.notin_(select(Application.id))
        )
    ).rowcount
    unlinked_authors = session.execute(
        update(ApplicationNote)
        .where(ApplicationNote.author_id.isnot(None))
        .where(ApplicationNote.author_id.notin_(select(User.id)))
        .values(author_id=None)
    ).rowcount
    profile_entries = delete_orphaned_profile_entries(session)
    session.commit()

    counts = {
        "jobs": jobs,
        "applications": applications,
        "notes": notes,
        "unlinked_note_authors": unlinked_authors,
        "profile_entries": profile_entries,
    }
    logger.info("Orphan cleanup: %s", counts)
    return counts
