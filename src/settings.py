"""
Runtime configuration, read from LEDGER_* environment variables or a .env file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LedgerSettings(BaseSettings):
    """Ledger runner configuration"""

    model_config = SettingsConfigDict(env_prefix="LEDGER_", env_file=".env", case_sensitive=False, extra="ignore")

    # 1 runs the ledger sequentially; more partitions clients across worker threads
    workers: int = Field(default=1, ge=1)

    # Seconds a worker waits on its queue before re-checking for shutdown
    queue_timeout: float = Field(default=0.1, gt=0)

    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


@lru_cache()
def get_settings() -> LedgerSettings:
    """Return cached settings instance."""
    return LedgerSettings()
