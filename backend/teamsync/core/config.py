"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StorageBackend(str, Enum):
    """Which record store backs the persistence gateway."""
    SQL = "sql"
    LOCAL = "local"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden by an environment variable of the same
    name (case-insensitive) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # Storage
    # STORAGE_BACKEND picks the record store once at startup; business logic
    # never inspects it.
    storage_backend: StorageBackend = Field(
        default=StorageBackend.SQL,
        description="Record store: 'sql' (document table) or 'local' (JSON files)"
    )
    database_url: str = Field(
        default="sqlite:///./teamsync.db",
        description="Database connection URL for the SQL record store"
    )
    local_storage_dir: str = Field(
        default="./.teamsync-storage",
        description="Directory holding one JSON file per collection (local backend)"
    )
    local_storage_latency_ms: int = Field(
        default=0,
        description="Simulated latency per local-storage call, in milliseconds"
    )
    seed_local_storage: bool = Field(
        default=True,
        description="Seed empty local collections with sample data on first read"
    )

    # Activity feed
    activity_feed_limit: int = Field(
        default=50,
        description="Number of activity entries retained and listed"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Authentication
    # JWT_SECRET_KEY: signing key for session tokens. Default is insecure; override in production.
    jwt_secret_key: str = Field(
        default="dev-insecure-key-change-me",
        description="JWT signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    token_expire_hours: int = Field(
        default=24,
        description="Hours until a session token expires"
    )

    # Text assist (LiteLLM model string, empty = disabled)
    assist_model: str = Field(
        default="",
        description="LiteLLM model for the writing assistant (empty = disabled)"
    )
    assist_api_key: str = Field(
        default="",
        description="API key for the writing assistant provider"
    )
    assist_api_base: str = Field(
        default="",
        description="Base URL for the writing assistant provider (optional)"
    )
    assist_timeout: int = Field(
        default=30,
        description="Seconds before an assist completion call is abandoned"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('activity_feed_limit')
    @classmethod
    def validate_feed_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("activity_feed_limit must be at least 1")
        return v

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, returns silently and main.py logs warnings instead.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == "dev-insecure-key-change-me":
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if self.storage_backend == StorageBackend.LOCAL:
            errors.append(
                "STORAGE_BACKEND=local is a development mock. "
                "Use the sql backend in production."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )


# Global settings instance
settings = Settings()
