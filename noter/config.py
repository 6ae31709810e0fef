"""
Noter Backend: Application Configuration
==========================================

What:  Typed settings loaded from environment variables and an optional .env file.
How:   Pydantic Settings reads the process environment and the .env file,
       coerces types and validates values. Variables already set in the
       process environment take precedence over values from the file.
Who:   Loaded once by the entry point and passed to the Server.
When:  Process start. There is no hot reload; the model is frozen.

Environment Variables:
    PORT, HOST                      HTTP listen address
    DB_HOST, DB_PORT, DB_USER,
    DB_PASSWORD, DB_NAME,
    DB_SSLMODE                      PostgreSQL connection parameters
    LOG_LEVEL                       DEBUG, INFO, WARNING, ERROR, CRITICAL
    DB_CONNECT_TIMEOUT              Startup ping bound (seconds)
    DB_HEALTH_TIMEOUT               /db/health ping bound (seconds)
    SHUTDOWN_TIMEOUT                Graceful shutdown deadline (seconds)
"""

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from noter.exceptions import ConfigurationError

DEFAULT_ENV_FILE = ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults so the service starts against a
    local PostgreSQL without any configuration.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="postgres")
    db_name: str = Field(default="noter")
    # Passed to asyncpg as its `ssl` argument: disable, allow, prefer,
    # require, verify-ca, verify-full
    db_sslmode: str = Field(default="disable")

    # ── Timeouts (seconds) ────────────────────────────────────────────────
    db_connect_timeout: float = Field(default=10.0, gt=0)
    db_health_timeout: float = Field(default=3.0, gt=0)
    shutdown_timeout: float = Field(default=5.0, gt=0)

    # ── Logging ───────────────────────────────────────────────────────────
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

    model_config = SettingsConfigDict(
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def database_url(self) -> URL:
        """Async PostgreSQL URL (asyncpg driver) built from the DB_* fields."""
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"ssl": self.db_sslmode},
        )


def load_settings(env_file: Optional[str] = DEFAULT_ENV_FILE) -> Settings:
    """
    Build Settings from the environment, reading `env_file` if it exists.

    Pass env_file=None to ignore .env files entirely (used by tests).

    Raises:
        ConfigurationError: A variable is set to a value that does not parse.
    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigurationError(
            message="Configuration validation failed",
            operation="load settings",
            cause=e,
        ) from e
