"""
Shared configuration management for the Access Layer policy reader.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class PolicyConfig(BaseConfig):
    """Policy reader configuration."""

    # Authorization DSL file read when no path is given explicitly
    policy_file: Optional[str] = Field(default=None)


def get_config() -> PolicyConfig:
    """Get configuration for the policy reader."""
    return PolicyConfig()
