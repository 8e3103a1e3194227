"""
Core configuration management for DataSeeder.

This module provides centralized configuration using Pydantic settings with
support for environment variables, ``.env`` files and type validation. It
also defines ``SeederOptions``, the immutable-per-run policy object consumed
by the seeder orchestrator.

Classes:
    Settings: Application settings loaded from the environment
    SeederOptions: Ordering, concurrency and error policy for a seeding run

Environment Variables:
    Every ``Settings`` attribute can be overridden with an environment
    variable of the same name (case-sensitive). Seeder options use the
    ``SEEDER_`` prefix, e.g. ``SEEDER_ENABLE_PARALLELIZATION=true``.

Example:
    >>> from dataseeder.core.config.settings import Settings
    >>> settings = Settings()
    >>> options = settings.seeder_options
    >>> options.max_degree_of_parallelization
    4
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeederOptions(BaseModel):
    """
    Execution policy for a seeding run.

    The options are fixed for the lifetime of an orchestrator. Assignment is
    validated, so a negative timeout or a zero parallelism ceiling is rejected
    even when set after construction.

    Attributes:
        throw_on_circular_dependency: Fail when a dependency cycle is found;
            when False the cycle edge is silently dropped
        enable_parallelization: Run seeders sharing one priority concurrently
        max_degree_of_parallelization: Concurrency ceiling inside one priority
        continue_on_error: Log seeder failures and keep going instead of
            aborting the run on the first failure
        seeder_timeout: Deadline for a single seeder, in seconds
    """

    model_config = ConfigDict(validate_assignment=True)

    throw_on_circular_dependency: bool = True
    enable_parallelization: bool = False
    max_degree_of_parallelization: int = Field(default=4, ge=1)
    continue_on_error: bool = False
    seeder_timeout: float = Field(default=300, gt=0)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Attributes:
        APP_NAME: Application name identifier
        APP_VERSION: Current application version
        ENVIRONMENT: Deployment environment (development/staging/production)
        DEBUG: Enable debug mode with rich console logging

        DATABASE_URL: SQLAlchemy async database URL seeders write to
        DATA_DIR: Base directory for seed data files

        LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        LOG_FORMAT: Log format (json/text)
        LOG_FILE_PATH: Path for log file output (optional)

        SEEDER_THROW_ON_CIRCULAR_DEPENDENCY: Fail on dependency cycles
        SEEDER_ENABLE_PARALLELIZATION: Run same-priority seeders concurrently
        SEEDER_MAX_DEGREE_OF_PARALLELIZATION: Concurrency ceiling per priority
        SEEDER_CONTINUE_ON_ERROR: Keep seeding after a seeder fails
        SEEDER_TIMEOUT: Per-seeder deadline in seconds

    Properties:
        seeder_options: SeederOptions built from the SEEDER_* values
    """

    # Application
    APP_NAME: str = "DataSeeder"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Database Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./dataseeder.db"
    DATA_DIR: str = "./data"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE_PATH: Optional[str] = None

    # Seeder Configuration
    SEEDER_THROW_ON_CIRCULAR_DEPENDENCY: bool = True
    SEEDER_ENABLE_PARALLELIZATION: bool = False
    SEEDER_MAX_DEGREE_OF_PARALLELIZATION: int = 4
    SEEDER_CONTINUE_ON_ERROR: bool = False
    SEEDER_TIMEOUT: float = 300

    @property
    def seeder_options(self) -> SeederOptions:
        """
        Build the orchestrator policy from the SEEDER_* settings.

        Returns:
            SeederOptions: Validated options for a seeding run

        Raises:
            pydantic.ValidationError: If a SEEDER_* value is out of range
        """
        return SeederOptions(
            throw_on_circular_dependency=self.SEEDER_THROW_ON_CIRCULAR_DEPENDENCY,
            enable_parallelization=self.SEEDER_ENABLE_PARALLELIZATION,
            max_degree_of_parallelization=self.SEEDER_MAX_DEGREE_OF_PARALLELIZATION,
            continue_on_error=self.SEEDER_CONTINUE_ON_ERROR,
            seeder_timeout=self.SEEDER_TIMEOUT,
        )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate logging level is a supported value.

        Args:
            v (str): The log level value to validate

        Returns:
            str: The validated and upper-cased log level

        Raises:
            ValueError: If log level is not supported
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is json or text"""
        if v.lower() not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # This will ignore extra fields from environment
    )


def get_settings() -> Settings:
    """Get application settings instance"""
    return Settings()


settings = Settings()
