"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Configurable scan dispatch threshold and operator message table
- Computed properties for derived values

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from orderpiqr.picklist import COMPLETION_MESSAGE


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy database connection string
        pick_list_length_threshold: Scans longer than this are pick lists
        completion_message: Lines shown once a pick list is finished
        no_pick_list_message: Shown when an item is scanned before a list
        scan_cooldown_seconds: Window for ignoring repeated identical scans
        session_timeout_hours: Idle sessions older than this are purged
        auto_cleanup_enabled: Enable automatic cleanup task
        cleanup_interval_minutes: Cleanup task interval
        log_directory: Directory for pick completion logs
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> settings.pick_list_length_threshold
        12
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="OrderPiQR API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/orderpiqr.db",
        description="SQLAlchemy database connection string"
    )

    # =========================================================================
    # SCAN SETTINGS
    # =========================================================================
    pick_list_length_threshold: int = Field(
        default=12,
        ge=0,
        description="Scanned text longer than this is treated as a pick list"
    )

    completion_message: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(COMPLETION_MESSAGE),
        min_length=1,
        description="Lines shown when the pick list is finished"
    )

    no_pick_list_message: str = Field(
        default="Scan eerst een pickbon.",
        min_length=1,
        description="Shown when an item is scanned before any pick list"
    )

    scan_cooldown_seconds: float = Field(
        default=1.0,
        ge=0,
        le=60,
        description="Identical consecutive scans within this window are ignored"
    )

    # =========================================================================
    # CLEANUP SETTINGS
    # =========================================================================
    session_timeout_hours: int = Field(
        default=24,
        ge=1,
        le=720,  # Max 30 days
        description="Delete sessions idle for longer than this"
    )

    auto_cleanup_enabled: bool = Field(
        default=True,
        description="Enable automatic cleanup of idle sessions"
    )

    cleanup_interval_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,  # Max 24 hours
        description="Cleanup task interval in minutes"
    )

    # =========================================================================
    # FILE PATH SETTINGS
    # =========================================================================
    log_directory: str = Field(
        default="storage/logs",
        description="Directory for pick completion logs"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("completion_message", mode="before")
    @classmethod
    def parse_completion_message(cls, value: Any) -> Any:
        """
        Accept the message table as a JSON array string.

        The field is NoDecode, so environment values arrive here as raw
        text; plain text that is not JSON becomes a single line.

        Args:
            value: List of lines, JSON array string or one plain line

        Returns:
            List of lines
        """
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                return [value]
            if isinstance(parsed, list):
                return [str(line) for line in parsed]
            return [str(parsed)]
        return value

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def log_path(self) -> Path:
        """
        Get log directory as Path object.

        Creates the directory if it doesn't exist.
        """
        path = Path(self.log_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from JSON string to list."""
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for non-SQLite or in-memory databases
        """
        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url.replace("sqlite:///", "")
            if not db_path or db_path == ":memory:":
                return None
            if db_path.startswith("./"):
                db_path = db_path[2:]
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """Create the log directory and, for SQLite, the database directory."""
        self.log_path.mkdir(parents=True, exist_ok=True)

        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Uses lru_cache to ensure only one Settings instance is created
    throughout the application lifecycle.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
