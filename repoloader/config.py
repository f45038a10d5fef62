"""Settings management for repoloader.

This module provides centralized configuration management using pydantic-settings.
All configuration is loaded from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loader settings loaded from environment variables.

    Every field can be overridden with a ``REPOLOADER_`` prefixed variable,
    e.g. ``REPOLOADER_DEFAULT_BRANCH=main``.

    Attributes:
        git_executable: Git binary used for every command.
        default_branch: Local branch used as the first divergence baseline.
        remote_name: Remote whose default branch is the second baseline.
        command_timeout: Seconds before a synchronous git command is killed.

        log_level: Logging level.
        logs_enabled: Disable all log output when False.
        json_logs: Render logs as JSON instead of console lines.
    """

    model_config = SettingsConfigDict(
        env_prefix="REPOLOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Git settings
    git_executable: str = Field(default="git", description="Git binary")
    default_branch: str = Field(default="master", description="Local default branch")
    remote_name: str = Field(default="origin", description="Remote name")
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for synchronous git commands",
    )

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    logs_enabled: bool = Field(default=True, description="Enable log output")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @property
    def remote_default_branch(self) -> str:
        """Remote-tracking name of the default branch, e.g. ``origin/master``."""
        return f"{self.remote_name}/{self.default_branch}"


@lru_cache
def get_settings() -> Settings:
    """Get cached loader settings.

    Uses lru_cache to ensure settings are loaded once and reused.

    Returns:
        The settings instance.
    """
    return Settings()
