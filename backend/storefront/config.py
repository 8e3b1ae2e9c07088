"""
Storefront Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Two settings classes read from environment variables (or a .env file):

       - Settings:         application-wide knobs (paths, CORS, logging, SMTP)
       - DatabaseSettings: the DB_* credential set, loaded once at startup by
                           load_database_credentials()

When:  `settings` is built at import time. Database credentials are NOT read at
       import; the application lifespan loads them exactly once and refuses to
       start if the required ones are missing.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, ValidationError as PydanticValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.exceptions import ConfigurationError

# Environment variables that must be present for the database collaborator.
REQUIRED_DB_VARIABLES = ("DB_HOST", "DB_PORT", "DB_USER", "DB_NAME")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Attributes are grouped by concern.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # Root for all JSON-file persistence, relative to the process CWD.
    # Layout:
    #   <data_root>/pages/<slug>.json
    #   <data_root>/branding-settings.json
    #   <data_root>/email-logs/logs.json
    data_root: str = Field(default="./data")

    # ── Database ──────────────────────────────────────────────────────────
    # SQLAlchemy async driver; credentials come from DatabaseSettings.
    database_driver: str = Field(default="postgresql+asyncpg")
    db_pool_size: int = Field(default=20, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Mail transport ────────────────────────────────────────────────────
    smtp_host: str = Field(default="localhost")
    smtp_port: int = Field(default=25, ge=1, le=65535)
    smtp_username: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    smtp_use_tls: bool = Field(default=False)
    smtp_timeout: int = Field(default=30, ge=1, le=300)
    mail_from: str = Field(default="noreply@storefront.local")

    # Tenacity settings for transient SMTP failures
    mail_retry_attempts: int = Field(default=3, ge=1, le=10)
    mail_retry_min_wait: int = Field(default=1, ge=0, le=30)
    mail_retry_max_wait: int = Field(default=10, ge=1, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of allowed origins (the admin/storefront frontend)
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Derived paths ─────────────────────────────────────────────────────
    @property
    def pages_dir(self) -> Path:
        return Path(self.data_root) / "pages"

    @property
    def branding_settings_path(self) -> Path:
        return Path(self.data_root) / "branding-settings.json"

    @property
    def email_logs_path(self) -> Path:
        return Path(self.data_root) / "email-logs" / "logs.json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class DatabaseSettings(BaseSettings):
    """
    Database connection parameters read from DB_* environment variables.

    Required: DB_HOST, DB_PORT, DB_USER, DB_NAME
    Optional: DB_PASSWORD (defaults to an empty string)

    Frozen once built; the engine factory receives this object instead of
    re-reading the environment.
    """

    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: str = ""
    name: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("host", "user", "name", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("port", mode="before")
    @classmethod
    def blank_port_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("password", mode="before")
    @classmethod
    def password_default(cls, v):
        return "" if v is None else v

    @model_validator(mode="after")
    def require_connection_fields(self) -> "DatabaseSettings":
        missing = [
            var
            for var, value in zip(REQUIRED_DB_VARIABLES, (self.host, self.port, self.user, self.name))
            if value is None
        ]
        if missing:
            raise ValueError(
                "Missing database environment variables: "
                f"{', '.join(missing)}. Required: {', '.join(REQUIRED_DB_VARIABLES)}"
            )
        return self


def load_database_credentials(env_file: Optional[str] = ".env") -> DatabaseSettings:
    """
    Read and validate the DB_* credential set.

    Args:
        env_file: dotenv file consulted after the process environment.
                  Pass None to read the process environment only.

    Raises:
        ConfigurationError: a required variable is absent or DB_PORT is not an
                            integer. The message names the offending variables.
    """
    try:
        return DatabaseSettings(_env_file=env_file)
    except PydanticValidationError as e:
        messages = []
        for error in e.errors():
            if error.get("loc"):
                messages.append(f"DB_{str(error['loc'][0]).upper()}: {error['msg']}")
            else:
                messages.append(str(error["msg"]).removeprefix("Value error, "))
        raise ConfigurationError("; ".join(messages)) from e


# Singleton instance, imported throughout the application
settings = Settings()
