"""Application configuration schema and validation."""

from typing import Literal

from pydantic import Field, PostgresDsn, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        ...,
        description="Application environment",
    )
    db_dsn: PostgresDsn = Field(
        ...,
        description="PostgreSQL database connection string",
    )
    db_pool_min: int = Field(
        default=2,
        ge=1,
        description="Minimum database connection pool size",
    )
    db_pool_max: int = Field(
        default=10,
        ge=1,
        description="Maximum database connection pool size",
    )
    api_key_football_data: SecretStr = Field(
        default=SecretStr(""),
        description="API key for football-data.org (X-Auth-Token)",
    )
    football_data_base_url: str = Field(
        default="https://api.football-data.org/v4",
        description="Base URL of the football-data.org API",
    )
    sync_days_ahead: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Number of days ahead to sync fixtures for",
    )
    sim_iterations: int = Field(
        default=20000,
        ge=1000,
        le=500000,
        description="Monte Carlo iterations per orientation",
    )
    first_half_goal_share: float = Field(
        default=0.45,
        gt=0.0,
        lt=1.0,
        description="Share of full-match expected goals assigned to the first half",
    )
    under_goals_line: float = Field(
        default=3.5,
        gt=0.0,
        description="Per-half goals line for the under legs",
    )
    over_corners_line: float = Field(
        default=5.5,
        ge=0.0,
        description="Total corners line for the over leg",
    )
    bookmaker_margin: float = Field(
        default=0.20,
        ge=0.0,
        lt=1.0,
        description="Assumed bookmaker margin for synthetic prices (placeholder)",
    )
    best_price_markup: float = Field(
        default=1.10,
        ge=1.0,
        le=2.0,
        description="Best-available vs average price factor for synthetic prices (placeholder)",
    )
    high_confidence_threshold: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Model probability above which a bet is tagged High confidence",
    )
    max_value_bets: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum number of value bets returned per analysis",
    )
    analysis_concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum matches analysed concurrently",
    )
    analysis_seed: int | None = Field(
        default=None,
        ge=0,
        description="Base seed for reproducible analysis runs (None = fresh entropy)",
    )
    max_retry_attempts: int = Field(
        default=2,
        ge=0,
        le=5,
        description="Maximum ingestion retry attempts",
    )
    competitions_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="TTL for cached competition listings",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="HTTP server bind address",
    )
    server_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="HTTP server port",
    )

    @field_validator("db_pool_max")
    @classmethod
    def validate_pool_max(cls, v: int, info) -> int:
        """Ensure pool_max >= pool_min."""
        if "db_pool_min" in info.data and v < info.data["db_pool_min"]:
            raise ValueError("db_pool_max must be >= db_pool_min")
        return v


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the singleton AppConfig instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config
