from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite:///./ledger.db"
    log_level: str = "INFO"

    # Seconds to wait for a ledger lock before giving up with a StorageError
    lock_timeout_seconds: float = 10.0

    # Session lifetime and how often expired sessions are swept
    session_ttl_hours: int = 24 * 7
    session_sweep_interval_seconds: int = 3600

    # bcrypt work factor for password hashes
    password_hash_rounds: int = 12


@lru_cache
def get_settings() -> Settings:
    return Settings()
