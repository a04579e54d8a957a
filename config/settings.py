"""Application settings using Pydantic."""
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///job_board.db",
        description="SQLAlchemy database URL",
    )

    # Jobs
    job_expiry_days: int = Field(
        default=30,
        description="Days a new posting stays open before it expires",
    )

    # Scoring
    score_mode: Literal["inline", "deferred"] = Field(
        default="inline",
        description="Score applications on submission, or queue them for later",
    )
    score_drain_interval_seconds: int = Field(
        default=60,
        description="How often the scheduler drains the deferred scoring queue",
    )

    # Application lifecycle
    enforce_status_transitions: bool = Field(
        default=False,
        description="Reject status changes missing from the transition table",
    )

    # Pagination
    default_page_size: int = Field(default=10, description="Default page size")
    max_page_size: int = Field(default=100, description="Upper bound on page size")

    # Accounts
    min_password_length: int = Field(
        default=6,
        description="Minimum password length for registration",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a rotating log file",
    )

    # Paths
    config_dir: Path = Field(
        default=Path(__file__).parent,
        description="Configuration directory",
    )

    @property
    def seed_path(self) -> Path:
        """Path to the sample data used by scripts/seed.py."""
        return self.config_dir / "seed.yaml"

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return self.config_dir.parent


# Global settings instance
settings = Settings()
