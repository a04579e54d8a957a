#!/usr/bin/env python3
"""Load sample accounts, jobs and applications.

Reads config/seed.yaml. Applications go through ApplicationService so
their scores come from the fit scorer.

Usage:
    python -m scripts.seed            # add sample data
    python -m scripts.seed --reset    # drop all tables first
"""
import argparse
import logging
from pathlib import Path

import yaml

from scripts.bootstrap import drop_db, get_session, init_db, settings
from jobboard.access.policy import Actor
from jobboard.auth.service import hash_password
from jobboard.logging_config import setup_logging
from jobboard.persistence.models import Job, Role, User
from jobboard.tracking.application_service import ApplicationService
from jobboard.tracking.fields import build_education, build_experience
from jobboard.tracking.job_service import JobService

logger = logging.getLogger(__name__)


def load_seed(path: Path) -> dict:
    """Load seed data from YAML file."""
    with open(path) as f:
        return yaml.safe_load(f)


def seed_users(session, users: list[dict]) -> dict[str, User]:
    """Create accounts directly (admins cannot self-register)."""
    created = {}
    for entry in users:
        entry = dict(entry)
        experience = build_experience(entry.pop("experience", []))
        education = build_education(entry.pop("education", []))
        user = User(
            password_hash=hash_password(entry.pop("password")),
            role=Role(entry.pop("role")),
            experience=experience,
            education=education,
            **entry,
        )
        session.add(user)
        created[user.email] = user
    session.commit()
    logger.info("Inserted %d users", len(created))
    return created


def seed_jobs(session, jobs: list[dict], users: dict[str, User]) -> dict[str, Job]:
    service = JobService(session)
    created = {}
    for entry in jobs:
        entry = dict(entry)
        owner = users[entry.pop("owner")]
        job = service.create_job(Actor.from_user(owner), **entry)
        created[job.title] = job
    logger.info("Inserted %d jobs", len(created))
    return created


def seed_applications(
    session,
    applications: list[dict],
    users: dict[str, User],
    jobs: dict[str, Job],
) -> int:
    service = ApplicationService(session, score_mode="inline")
    admin = Actor(id="seed", role=Role.ADMIN)
    for entry in applications:
        applicant = users[entry["applicant"]]
        application = service.submit_application(
            Actor.from_user(applicant),
            jobs[entry["job"]].id,
            cover_letter=entry.get("cover_letter"),
        )
        if entry.get("status"):
            service.update_status(admin, application.id, entry["status"])
    logger.info("Inserted %d applications", len(applications))
    return len(applications)


def main():
    setup_logging()

    arg_parser = argparse.ArgumentParser(description="Load sample job board data.")
    arg_parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before seeding.",
    )
    arg_parser.add_argument(
        "--file",
        type=Path,
        default=settings.seed_path,
        help="Seed file (default: config/seed.yaml).",
    )
    args = arg_parser.parse_args()

    if args.reset:
        logger.info("Dropping existing data")
        drop_db()
    init_db()

    data = load_seed(args.file)
    with get_session() as session:
        users = seed_users(session, data.get("users", []))
        jobs = seed_jobs(session, data.get("jobs", []), users)
        seed_applications(session, data.get("applications", []), users, jobs)

    logger.info("Database seeded successfully")


if __name__ == "__main__":
    main()
