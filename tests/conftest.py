"""Pytest fixtures for job board tests."""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jobboard.access.policy import Actor
from jobboard.matching.scoring_queue import ScoringQueue
from jobboard.persistence.database import enable_sqlite_foreign_keys
from jobboard.persistence.models import (
    Application,
    Base,
    Education,
    Experience,
    Job,
    JobStatus,
    JobType,
    Role,
    User,
)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


# =============================================================================
# ENTITY FACTORIES
# =============================================================================


@pytest.fixture
def user_factory(test_db):
    """
    Factory fixture to create persisted users.

    Usage:
        employer = user_factory(Role.EMPLOYER, name="Acme HR")
        seeker = user_factory(Role.JOBSEEKER, skills=["python"])
    """
    counter = {"n": 0}

    def _create_user(role: Role = Role.JOBSEEKER, **fields):
        counter["n"] += 1
        n = counter["n"]
        fields.setdefault("name", f"{role.value.title()} {n}")
        fields.setdefault("email", f"{role.value}{n}@example.com")
        user = User(role=role, **fields)
        test_db.add(user)
        test_db.commit()
        return user

    return _create_user


@pytest.fixture
def job_factory(test_db):
    """Factory fixture to create jobs owned by a given user."""

    def _create_job(owner: User, **fields):
        fields.setdefault("title", "Software Engineer")
        fields.setdefault("company", owner.company_name or "Acme")
        fields.setdefault("location", "Remote")
        fields.setdefault("job_type", JobType.FULL_TIME)
        fields.setdefault("description", "Build things.")
        fields.setdefault("skills", ["Python"])
        job = Job(owner_id=owner.id, **fields)
        test_db.add(job)
        test_db.commit()
        return job

    return _create_job


@pytest.fixture
def application_factory(test_db):
    """Factory fixture to create applications without going through the service."""

    def _create_application(job: Job, applicant: User, **fields):
        fields.setdefault("resume", "uploads/resume.pdf")
        application = Application(job=job, applicant=applicant, **fields)
        test_db.add(application)
        test_db.commit()
        return application

    return _create_application


@pytest.fixture
def admin(user_factory):
    return user_factory(Role.ADMIN, name="Admin User")


@pytest.fixture
def employer(user_factory):
    return user_factory(Role.EMPLOYER, company_name="Tech Innovations")


@pytest.fixture
def other_employer(user_factory):
    return user_factory(Role.EMPLOYER, company_name="Global Solutions")


@pytest.fixture
def jobseeker(user_factory):
    """Jobseeker with the profile used in the scoring scenario."""
    start = datetime(2015, 1, 1, tzinfo=timezone.utc)
    return user_factory(
        Role.JOBSEEKER,
        name="Jobseeker One",
        resume="uploads/resume1.pdf",
        skills=["react", "express"],
        experience=[
            Experience(
                company="Web Experts",
                position="Frontend Developer",
                start_date=start,
                end_date=start + timedelta(days=5 * 365),
            )
        ],
        education=[
            Education(institution="CS University", degree="Bachelor"),
            Education(institution="Tech Institute", degree="Master"),
        ],
    )


@pytest.fixture
def other_jobseeker(user_factory):
    return user_factory(Role.JOBSEEKER, resume="uploads/resume2.pdf", skills=["python"])


@pytest.fixture
def job(job_factory, employer):
    """Active job requiring React and Node.js."""
    return job_factory(employer, title="Full Stack Developer", skills=["React", "Node.js"])


@pytest.fixture
def inactive_job(job_factory, employer):
    return job_factory(employer, title="Paused Role", status=JobStatus.INACTIVE)


@pytest.fixture
def expired_job(job_factory, employer):
    created = datetime.now(timezone.utc) - timedelta(days=60)
    return job_factory(
        employer,
        title="Old Role",
        created_at=created,
        expires_at=created + timedelta(days=30),
    )


@pytest.fixture
def application(application_factory, job, jobseeker):
    return application_factory(job, jobseeker)


# =============================================================================
# ACTOR FIXTURES
# =============================================================================


@pytest.fixture
def admin_actor(admin):
    return Actor.from_user(admin)


@pytest.fixture
def employer_actor(employer):
    return Actor.from_user(employer)


@pytest.fixture
def other_employer_actor(other_employer):
    return Actor.from_user(other_employer)


@pytest.fixture
def jobseeker_actor(jobseeker):
    return Actor.from_user(jobseeker)


@pytest.fixture
def other_jobseeker_actor(other_jobseeker):
    return Actor.from_user(other_jobseeker)


# =============================================================================
# SCORING FIXTURES
# =============================================================================


@pytest.fixture
def scoring_queue():
    """Scoring queue with the default fit scorer."""
    return ScoringQueue()
