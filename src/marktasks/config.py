"""Application configuration.

Configuration is loaded from environment variables. For local use, you can provide a
`.env` file in the working directory or set `MARKTASKS_ENV_FILE` to point to one.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marktasks.utils.patterns import DEFAULT_PROJECT_ID, is_project_id


class Settings(BaseSettings):
    """marktasks settings.

    All fields are environment-configurable. Prefix is `MARKTASKS_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKTASKS_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = Field(default="WARNING")
    project_id: str = Field(default=DEFAULT_PROJECT_ID)

    # Output
    format_output: bool = Field(default=True)
    synthesize_missing_indexes: bool = Field(default=True)

    # IO
    max_concurrent_io: int = Field(default=16, ge=1, le=256)

    @field_validator("project_id")
    @classmethod
    def _check_project_id(cls, value: str) -> str:
        if not is_project_id(value):
            raise ValueError(f"project id must be 2-5 uppercase letters, got {value!r}")
        return value


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("MARKTASKS_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
