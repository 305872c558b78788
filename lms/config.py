"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./lms.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "LMS Progression Engine"
    version: str = "1.0.0"

    # Plans
    pro_plan_id: int = 3
    pro_xp_multiplier: float = 1.2

    # XP rewards
    attendance_recovery_xp: int = 150
    daily_login_xp: int = 10

    # Content levels
    default_days_to_unlock: int = 7  # levels with order > 1 and no explicit delay

    leaderboard_limit: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
