"""
Configuration Management

Uses Pydantic Settings for type-safe environment variable handling.
"""

import os
from functools import lru_cache

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.path.exists(".env") else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # PostgreSQL
    database_url: SecretStr | None = None
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10

    # Redis (job queue)
    redis_url: str = "redis://localhost:6379"
    redis_password: str | None = None
    redis_db: int = 0
    queue_name: str = "health-check"

    # Probe bursts
    probe_burst_size: int = 20
    probe_timeout_ms: int = 10000
    probe_user_agent: str = "InfraMind-HealthChecker/1.0"

    # Job orchestration
    worker_concurrency: int = 5
    worker_poll_interval_s: float = 1.0
    job_max_attempts: int = 3
    job_backoff_base_ms: int = 2000
    job_backoff_max_ms: int = 60000
    job_enqueue_delay_ms: int = 1000  # lets the admission write settle first
    queue_keep_completed: int = 100
    queue_keep_failed: int = 50

    @field_validator("probe_burst_size")
    @classmethod
    def validate_burst_size(cls, v: int) -> int:
        """Ensure the burst size is usable."""
        if not 1 <= v <= 500:
            raise ValueError("probe_burst_size must be between 1 and 500")
        return v

    @field_validator("probe_timeout_ms", "job_backoff_base_ms", "worker_concurrency")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("job_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        """At least one attempt is always made."""
        if v < 1:
            raise ValueError("job_max_attempts must be at least 1")
        return v

    @property
    def probe_timeout_s(self) -> float:
        return self.probe_timeout_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
