"""Engine configuration from environment variables."""

import os
from functools import lru_cache
from os.path import abspath, dirname, join
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives in the project root, one level above the package.
base_dir = dirname(dirname(abspath(__file__)))
env_file_path = join(base_dir, ".env")

if os.path.exists(env_file_path):
    load_dotenv(env_file_path)


class Settings(BaseSettings):
    """Engine settings loaded from ``MODRUN_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MODRUN_",
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Invocation limits
    default_timeout_seconds: float | None = None
    max_concurrency: int = Field(default=8, ge=1)

    # Argument files land in the system temp dir unless set
    temp_dir: str | None = None

    # Variables copied from the engine's own environment into every plugin
    env_passthrough: list[str] = Field(default_factory=lambda: ["PATH"])

    # Directories searched for plugins by name
    plugin_paths: list[str] = Field(default_factory=list)

    # Logging / tracing
    log_level: str = "INFO"
    otel_service_name: str = "modrun"

    @field_validator("default_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("default_timeout_seconds must be positive")
        return v

    @property
    def plugin_dirs(self) -> list[Path]:
        return [Path(p).expanduser() for p in self.plugin_paths]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
