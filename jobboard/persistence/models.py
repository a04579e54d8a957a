"""SQLAlchemy models for the job board."""
import uuid
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, relationship

from config.settings import settings


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Union[date, datetime, None]) -> Optional[datetime]:
    """Coerce a date or datetime to an aware UTC datetime.

    SQLite hands back naive datetimes, so naive values are taken to be UTC.
    Plain dates become midnight UTC.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


class Role(str, Enum):
    """The three fixed account roles."""

    ADMIN = "admin"
    EMPLOYER = "employer"
    JOBSEEKER = "jobseeker"


class JobStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    FILLED = "Filled"


class ApplicationStatus(str, Enum):
    """Statuses an application moves through (see tracking.lifecycle)."""

    APPLIED = "Applied"
    REVIEWED = "Reviewed"
    INTERVIEWED = "Interviewed"
    REJECTED = "Rejected"
    ACCEPTED = "Accepted"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry Level"
    MID = "Mid Level"
    SENIOR = "Senior Level"
    EXECUTIVE = "Executive"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"
    INTERNSHIP = "Internship"
    REMOTE = "Remote"


class SalaryType(str, Enum):
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


def _enum_column(enum_cls: type[Enum], **kwargs) -> Column:
    """String-backed enum column storing member values, not names."""
    return Column(
        SAEnum(
            enum_cls,
            native_enum=False,
            validate_strings=True,
            values_callable=lambda members: [m.value for m in members],
            length=32,
        ),
        **kwargs,
    )


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """Account for an admin, employer or jobseeker."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=True)
    role = _enum_column(Role, nullable=False, default=Role.JOBSEEKER)

    # Jobseeker profile
    resume = Column(String)  # Path handed back by the upload store
    skills = Column(JSON, default=list)
    profile_picture = Column(String)

    # Employer profile
    company_name = Column(String)
    company_description = Column(Text)
    company_logo = Column(String)
    company_website = Column(String)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    experience = relationship(
        "Experience",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Experience.start_date",
    )
    education = relationship(
        "Education",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    jobs = relationship("Job", back_populates="owner", cascade="all, delete-orphan")
    applications = relationship(
        "Application", back_populates="applicant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User {self.name} ({self.role})>"


class Experience(Base):
    """Work history entry on a jobseeker profile."""

    __tablename__ = "experience"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    company = Column(String)
    position = Column(String)
    start_date = Column(DateTime)
    end_date = Column(DateTime)  # Null while the position is ongoing
    description = Column(Text)

    user = relationship("User", back_populates="experience")

    def __repr__(self) -> str:
        return f"<Experience {self.position} at {self.company}>"


class Education(Base):
    """Education entry on a jobseeker profile."""

    __tablename__ = "education"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    institution = Column(String)
    degree = Column(String)
    field = Column(String)
    start_year = Column(Integer)
    end_year = Column(Integer)

    user = relationship("User", back_populates="education")

    def __repr__(self) -> str:
        return f"<Education {self.degree} at {self.institution}>"


class Job(Base):
    """Job posting owned by an employer."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=generate_uuid)
    owner_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    company = Column(String, nullable=False)
    location = Column(String, nullable=False)
    job_type = _enum_column(JobType, nullable=False)
    salary = Column(Integer)
    salary_type = _enum_column(SalaryType, default=SalaryType.MONTHLY)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, default=list)
    responsibilities = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    experience_level = _enum_column(ExperienceLevel, nullable=True)
    education_level = Column(String)

    status = _enum_column(JobStatus, nullable=False, default=JobStatus.ACTIVE)
    views = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime)

    # Relationships
    owner = relationship("User", back_populates="jobs")
    applications = relationship(
        "Application", back_populates="job", cascade="all, delete-orphan"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.created_at is None:
            self.created_at = utcnow()
        if self.expires_at is None:
            self.expires_at = as_utc(self.created_at) + timedelta(days=settings.job_expiry_days)
        if self.status is None:
            self.status = JobStatus.ACTIVE
        if self.views is None:
            self.views = 0

    def __repr__(self) -> str:
        return f"<Job {self.company} - {self.title}>"


class Application(Base):
    """A jobseeker's application to a job."""

    __tablename__ = "applications"
    __table_args__ = (
        # One application per (job, applicant); concurrent submissions race here
        UniqueConstraint("job_id", "applicant_id", name="uq_application_job_applicant"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_application_score_range"),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    job_id = Column(String, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resume = Column(String, nullable=False)
    cover_letter = Column(Text)

    status = _enum_column(ApplicationStatus, nullable=False, default=ApplicationStatus.APPLIED)
    score = Column(Integer, nullable=False, default=0)
    # Set while the score is a placeholder awaiting the deferred drain
    score_pending = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")
    notes = relationship(
        "ApplicationNote",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationNote.created_at",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.status is None:
            self.status = ApplicationStatus.APPLIED
        if self.score is None:
            self.score = 0
        if self.score_pending is None:
            self.score_pending = False

    def __repr__(self) -> str:
        return f"<Application job={self.job_id} applicant={self.applicant_id} ({self.status})>"


class ApplicationNote(Base):
    """Append-only note left on an application by the employer or an admin."""

    __tablename__ = "application_notes"

    id = Column(String, primary_key=True, default=generate_uuid)
    application_id = Column(
        String, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    author_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    application = relationship("Application", back_populates="notes")
    author = relationship("User")

    def __repr__(self) -> str:
        return f"<ApplicationNote {self.application_id} by {self.author_id}>"
