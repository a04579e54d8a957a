"""Tests for infrastructure: logging, engine setup, sessions, worker and seeding."""
import logging
import logging.handlers
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from jobboard.persistence.models import (
    Application,
    ApplicationStatus,
    Job,
    JobType,
    Role,
    User,
)


# =============================================================================
# Logging configuration tests
# =============================================================================


@contextmanager
def bare_root_logger():
    """Run a block with no root handlers, restoring them afterwards."""
    root = logging.getLogger()
    original_handlers = root.handlers.copy()
    original_level = root.level
    root.handlers.clear()
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)


class TestLoggingConfig:
    """Test logging setup."""

    def test_setup_logging_configures_root_logger(self):
        """setup_logging should add a console handler to the root logger."""
        from jobboard.logging_config import setup_logging

        with bare_root_logger() as root:
            setup_logging(level="WARNING")

            assert root.level == logging.WARNING
            assert any(type(h) is logging.StreamHandler for h in root.handlers)

    def test_setup_logging_idempotent(self):
        """Calling setup_logging twice should not add duplicate handlers."""
        from jobboard.logging_config import setup_logging

        with bare_root_logger() as root:
            setup_logging(level="INFO")
            count_after_first = len(root.handlers)
            setup_logging(level="INFO")

            assert len(root.handlers) == count_after_first

    def test_setup_logging_with_file(self, tmp_path):
        """setup_logging with log_file should add a rotating file handler."""
        from jobboard.logging_config import setup_logging

        with bare_root_logger() as root:
            setup_logging(level="DEBUG", log_file=str(tmp_path / "logs" / "jobboard.log"))

            assert any(
                isinstance(h, logging.handlers.RotatingFileHandler)
                for h in root.handlers
            )
        assert (tmp_path / "logs").is_dir()

    def test_repeated_call_applies_level(self):
        from jobboard.logging_config import setup_logging

        with bare_root_logger() as root:
            setup_logging(level="INFO")
            logger = setup_logging(level="debug")

            assert root.level == logging.DEBUG
        assert logger.name == "jobboard"

    def test_noisy_libraries_quieted(self):
        from jobboard.logging_config import setup_logging

        with bare_root_logger():
            setup_logging(level="DEBUG")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


# =============================================================================
# Database engine and session tests
# =============================================================================


class TestDatabaseEngine:
    """Test database engine configuration."""

    def test_sqlite_engine_enforces_foreign_keys(self):
        from jobboard.persistence.database import _build_engine

        engine = _build_engine("sqlite:///:memory:")
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
        engine.dispose()

    def test_get_or_raise(self, test_db, employer):
        from jobboard.exceptions import NotFoundError
        from jobboard.persistence.database import get_or_raise

        assert get_or_raise(test_db, User, employer.id) is employer
        with pytest.raises(NotFoundError) as exc_info:
            get_or_raise(test_db, User, "missing")
        assert exc_info.value.resource_type == "User"

    def test_get_session_commits(self):
        from jobboard.persistence import database

        session = MagicMock()
        with patch.object(database, "SessionLocal", return_value=session):
            with database.get_session():
                pass

        session.commit.assert_called_once()
        session.close.assert_called_once()

    def test_get_session_rolls_back_on_error(self):
        from jobboard.persistence import database

        session = MagicMock()
        with patch.object(database, "SessionLocal", return_value=session):
            with pytest.raises(RuntimeError):
                with database.get_session():
                    raise RuntimeError("boom")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()


# =============================================================================
# Worker tests
# =============================================================================


class TestScoringWorker:
    """Test the scheduled scoring drain."""

    def test_drain_with_nothing_pending(self, test_db):
        from jobboard import main

        @contextmanager
        def _session():
            yield test_db

        with patch.object(main, "get_session", _session):
            assert main.drain_scoring_queue() == 0

    def test_drain_scores_pending(self, test_db, job, jobseeker_actor, scoring_queue):
        from jobboard import main
        from jobboard.tracking.application_service import ApplicationService

        application = ApplicationService(
            test_db, queue=scoring_queue, score_mode="deferred"
        ).submit_application(jobseeker_actor, job.id)

        @contextmanager
        def _session():
            yield test_db

        with patch.object(main, "get_session", _session):
            assert main.drain_scoring_queue() == 1

        test_db.refresh(application)
        assert application.score == 53

    def test_worker_scores_submissions_from_another_engine(self, tmp_path):
        """Submission and drain share only the database file."""
        from jobboard import main
        from jobboard.access.policy import Actor
        from jobboard.matching.scoring_queue import ScoringQueue
        from jobboard.persistence.database import _build_engine
        from jobboard.persistence.models import Base, Education, Experience
        from jobboard.tracking.application_service import ApplicationService

        url = f"sqlite:///{tmp_path / 'board.db'}"
        submit_engine = _build_engine(url)
        worker_engine = _build_engine(url)
        Base.metadata.create_all(bind=submit_engine)

        start = datetime(2015, 1, 1, tzinfo=timezone.utc)
        with sessionmaker(bind=submit_engine)() as session:
            employer = User(name="HR", email="hr@example.com", role=Role.EMPLOYER)
            seeker = User(
                name="Seeker",
                email="seeker@example.com",
                role=Role.JOBSEEKER,
                resume="uploads/resume1.pdf",
                skills=["react", "express"],
                experience=[
                    Experience(start_date=start, end_date=start + timedelta(days=5 * 365))
                ],
                education=[
                    Education(institution="CS University", degree="Bachelor"),
                    Education(institution="Tech Institute", degree="Master"),
                ],
            )
            session.add_all([employer, seeker])
            session.commit()
            job = Job(
                owner_id=employer.id,
                title="Full Stack Developer",
                company="Tech Innovations",
                location="Remote",
                job_type=JobType.FULL_TIME,
                description="Build things.",
                skills=["React", "Node.js"],
            )
            session.add(job)
            session.commit()

            application_id = ApplicationService(
                session, queue=ScoringQueue(), score_mode="deferred"
            ).submit_application(Actor.from_user(seeker), job.id).id

        @contextmanager
        def _worker_session():
            with sessionmaker(bind=worker_engine)() as session:
                yield session

        with patch.object(main, "get_session", _worker_session):
            assert main.drain_scoring_queue() == 1

        with sessionmaker(bind=submit_engine)() as session:
            application = session.get(Application, application_id)
            assert application.score == 53
            assert application.score_pending is False

        submit_engine.dispose()
        worker_engine.dispose()

    def test_settings_defaults(self):
        assert settings.score_mode in ("inline", "deferred")
        assert settings.job_expiry_days == 30
        assert settings.seed_path.name == "seed.yaml"


# =============================================================================
# Seed script tests
# =============================================================================


class TestSeedScript:
    """Test loading the bundled sample data."""

    def test_seed_file_loads(self):
        from scripts.seed import load_seed

        data = load_seed(settings.seed_path)
        assert {"users", "jobs", "applications"} <= set(data)

    def test_seed_into_database(self, test_db):
        from scripts.seed import load_seed, seed_applications, seed_jobs, seed_users

        data = load_seed(settings.seed_path)
        users = seed_users(test_db, data["users"])
        jobs = seed_jobs(test_db, data["jobs"], users)
        seed_applications(test_db, data["applications"], users, jobs)

        assert users["admin@example.com"].role is Role.ADMIN
        assert test_db.execute(select(func.count()).select_from(Job)).scalar_one() == 4

        full_stack = jobs["Full Stack Developer"]
        application = test_db.execute(
            select(Application).where(Application.job_id == full_stack.id)
        ).scalar_one()
        assert application.status is ApplicationStatus.REVIEWED
        assert application.score == 66
