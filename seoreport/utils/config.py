"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # SE Ranking credentials (at least one must resolve per run)
    SERANKING_API_KEY: Optional[str] = None
    SE_RANKING_SHARED_API_KEY: Optional[str] = None
    SERANKING_BASE_URL: str = "https://api.seranking.com/v1"

    # Gateway behaviour
    RATE_LIMIT_PER_SECOND: int = 5
    ENABLE_CALL_LOGGING: bool = True
    API_TIMEOUT: int = 60

    # Report generation
    MAX_COMPETITORS: int = 5
    PROMPTS_PER_ENGINE: int = 8
    AGGREGATE_LIMIT: int = 50

    # Report storage
    REPORT_STORAGE_PATH: Optional[str] = None
    REPORT_TTL_HOURS: int = 24

    # Application Settings
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
