"""Configuration management for Smart Workflow.

This module provides configuration with environment variable support,
validation, and type safety using Pydantic Settings.
"""

from __future__ import annotations

import re
import warnings
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smart_workflow.core.exceptions import ConfigurationError
from smart_workflow.utils.db_compat import DbDialect, detect_dialect, is_sync_driver_url


class WorkflowConfig(BaseSettings):
    """Main configuration for Smart Workflow.

    All settings can be configured via environment variables with the
    ``WORKFLOW_`` prefix. Supports .env file loading for local development.

    Example:
        ```python
        # WORKFLOW_DATABASE_URL=postgresql+asyncpg://...
        # WORKFLOW_GEMINI_API_KEY=...

        config = WorkflowConfig()

        # Or programmatically
        config = WorkflowConfig(
            database_url="sqlite+aiosqlite:///./smart_workflow.db",
            gemini_api_key="...",
        )
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked secrets."""
        result = super().__repr__()
        result = re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", result)
        result = re.sub(
            r"(api_key|secret|password)=(?:'[^']*'|[^\s,)]+)",
            r"\1='***'",
            result,
            flags=re.IGNORECASE,
        )
        return result

    ##########################
    # Database Configuration #
    ##########################

    store_backend: Literal["sqlalchemy", "memory"] = Field(
        default="sqlalchemy",
        description="Record store implementation",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./smart_workflow.db",
        description="Record store connection URL",
    )

    database_pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size",
    )

    database_max_overflow: int = Field(
        default=20,
        ge=0,
        le=200,
        description="Max overflow connections beyond pool size",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL query logging (use only in development)",
    )

    ####################
    # Generative model #
    ####################

    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the generative-language model",
    )

    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Model name used for task suggestions",
    )

    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the generative-language REST API",
    )

    ai_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for one generation call",
    )

    ###################
    # Domain settings #
    ###################

    notification_page_size: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Number of newest notifications returned per user",
    )

    default_estimated_hours: float = Field(
        default=5,
        gt=0,
        description="Estimate assigned to suggestions that carry none",
    )

    default_suggested_role: str = Field(
        default="Developer",
        min_length=1,
        description="Role assigned to admin suggestions that carry none",
    )

    serialize_project_updates: bool = Field(
        default=True,
        description="Serialise progress recomputation per project within the process",
    )

    ##################
    # HTTP / logging #
    ##################

    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level applied at startup",
    )

    debug_errors: bool = Field(
        default=False,
        description="Include collaborator failure reasons in 500 responses",
    )

    host: str = Field(default="0.0.0.0", description="Bind address for the server")
    port: int = Field(default=5000, ge=1, le=65535, description="Bind port for the server")

    ##############
    # Validators #
    ##############

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Normalise the database URL, reject unknown dialects, warn about sync drivers."""
        url_str = str(v).rstrip("/")
        if url_str and detect_dialect(url_str) == DbDialect.UNKNOWN:
            scheme = url_str.split(":", 1)[0]
            raise ValueError(f"Unsupported database URL scheme: {scheme!r}")
        if is_sync_driver_url(url_str):
            warnings.warn(
                "Database URL uses a synchronous driver scheme. "
                "Use an async driver instead (e.g. postgresql+asyncpg, sqlite+aiosqlite).",
                stacklevel=4,
            )
        return url_str

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return str(v).upper()

    @field_validator("gemini_base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.rstrip("/")

    ##################
    # Helper Methods #
    ##################

    @property
    def ai_enabled(self) -> bool:
        """True when a generative-language API key is configured."""
        return bool(self.gemini_api_key)

    def model_post_init(self, __context: object) -> None:
        """Run cross-field validation after model construction."""
        self.validate_configuration()

    def validate_configuration(self) -> None:
        """Validate complete configuration consistency.

        Raises:
            ConfigurationError: If configuration is inconsistent
        """
        if self.store_backend == "sqlalchemy" and not self.database_url:
            raise ConfigurationError("database_url", "store_backend 'sqlalchemy' requires a URL")


__all__ = ["WorkflowConfig"]
