"""
Shared configuration management for the remote config engine.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteConfigSettings(BaseSettings):
    """Engine settings, read from ``REMOTE_CONFIG_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_CONFIG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    service_name: str = Field(default="remote_config")

    # Observability
    log_level: str = Field(default="info")
    log_renderer: str = Field(default="json", pattern="^(json|console)$")


@lru_cache(maxsize=1)
def get_settings() -> RemoteConfigSettings:
    """Get the process-wide settings instance."""
    return RemoteConfigSettings()
