"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="TASKLOOP_AI_LOG_LEVEL", description="Root console log level")
    format: str = Field(
        default="detailed", alias="TASKLOOP_AI_LOG_FORMAT", description="Log format (simple, detailed or json)"
    )
    enable_file: bool = Field(
        default=False, alias="TASKLOOP_AI_LOG_TO_FILE", description="Also write DEBUG logs to a file"
    )
    file_dir: str = Field(default="logs", alias="TASKLOOP_AI_LOG_DIR", description="Directory for the log file")

    model_config = {"populate_by_name": True}


class ActionConfig(BaseModel):
    """File and search action limits."""

    workspace_root: str = Field(
        default=".", alias="TASKLOOP_AI_WORKSPACE_ROOT", description="Base directory relative paths resolve against"
    )
    read_max_chars: int = Field(
        default=5000, alias="TASKLOOP_AI_READ_MAX_CHARS", description="Characters shown before a read is truncated"
    )
    search_max_matches: int = Field(
        default=50, alias="TASKLOOP_AI_SEARCH_MAX_MATCHES", description="Matches shown per search"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(default="INFO", alias="TASKLOOP_AI_LOG_LEVEL")
    log_format: str = Field(default="detailed", alias="TASKLOOP_AI_LOG_FORMAT")
    log_to_file: bool = Field(default=False, alias="TASKLOOP_AI_LOG_TO_FILE")
    log_dir: str = Field(default="logs", alias="TASKLOOP_AI_LOG_DIR")

    # =====================================================================
    # Orchestrator Loop
    # =====================================================================
    model: str = Field(
        default="openai:gpt-4o",
        description="pydantic-ai model identifier used by the reasoning engine",
        alias="TASKLOOP_AI_MODEL",
    )
    recursion_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum reasoning-engine proposals per run invocation",
        alias="TASKLOOP_AI_RECURSION_LIMIT",
    )
    thread_id: str = Field(
        default="example-thread-123",
        description="Default task thread identifier",
        alias="TASKLOOP_AI_THREAD_ID",
    )
    strict_affirmative: bool = Field(
        default=False,
        description="Only accept 'y'/'yes' as satisfaction instead of any reply containing 'y'",
        alias="TASKLOOP_AI_STRICT_AFFIRMATIVE",
    )

    # =====================================================================
    # Actions
    # =====================================================================
    workspace_root: str = Field(default=".", alias="TASKLOOP_AI_WORKSPACE_ROOT")
    read_max_chars: int = Field(default=5000, ge=1, alias="TASKLOOP_AI_READ_MAX_CHARS")
    search_max_matches: int = Field(default=50, ge=1, alias="TASKLOOP_AI_SEARCH_MAX_MATCHES")

    # =====================================================================
    # Session Persistence
    # =====================================================================
    session_db_url: Optional[str] = Field(
        default=None,
        description="Async SQLAlchemy URL for durable session storage; in-memory when unset",
        alias="TASKLOOP_AI_SESSION_DB_URL",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def actions(self) -> ActionConfig:
        """Get action configuration from environment variables."""
        return ActionConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
