"""Engine Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can come from a RELSTORE_* environment variable or .env
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out of the box: coworking domain, in-memory storage, demo seed
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relstore.core.domain_types import StorageBackend


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RELSTORE_", env_file=".env", case_sensitive=False,
    )

    # Domain
    domain: Literal["coworking", "real_estate"] = "coworking"
    seed_on_empty: bool = True

    # Storage
    storage_backend: StorageBackend = StorageBackend.MEMORY
    storage_dir: str = "data"
    database_url: str = "sqlite:///relstore.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgres:// but SQLAlchemy needs postgresql://."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
