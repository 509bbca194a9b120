"""
Track Analytics
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational engine configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="spotify_db", alias="POSTGRES_DB", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: SecretStr = Field(default="postgres", description="Database password")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=2, description="Max overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="SQLAlchemy URL (overrides host/port/db)",
    )

    @property
    def sync_url(self) -> str:
        """Sync database URL for psycopg2"""
        return f"postgresql+psycopg2://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"

    def get_url(self) -> str:
        """Database URL - uses DATABASE_URL if set, otherwise builds the PostgreSQL URL"""
        if self.url:
            return self.url
        return self.sync_url


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class OptimizationSettings(BaseSettings):
    """Index experiment configuration"""

    model_config = SettingsConfigDict(env_prefix="OPTIMIZATION_")

    default_column: str = Field(default="artist", description="Column indexed when none is given")
    repeats: int = Field(default=3, ge=1, description="Measurements per run; the fastest is kept")
    tolerance: float = Field(
        default=1.10,
        gt=0,
        description="Indexed execution may be at most baseline * tolerance",
    )


class LoaderSettings(BaseSettings):
    """Bulk load configuration"""

    model_config = SettingsConfigDict(env_prefix="LOADER_")

    delimiter: str = Field(default=",", description="CSV field delimiter")
    encoding: str = Field(default="utf8", description="File encoding")
    chunk_size: int = Field(default=5000, ge=1, description="Rows per INSERT batch")
    null_values: List[str] = Field(
        default=["", "NULL", "null", "None", "NA", "N/A"],
        description="Markers read as NULL",
    )
    validate_before_insert: bool = Field(default=True, description="Run data quality checks before insert")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="track-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    optimization: OptimizationSettings = Field(default_factory=OptimizationSettings)
    loader: LoaderSettings = Field(default_factory=LoaderSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
