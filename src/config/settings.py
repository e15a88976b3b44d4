"""
Application settings with Pydantic v2 validation.

Each concern reads its own environment prefix: STORAGE_, LEDGER_ and API_.
Top-level keys (ENVIRONMENT, LOG_LEVEL, LOG_FORMAT) have no prefix and may
also come from a `.env` file.
"""

from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger database lives and how it is opened."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockledger.db"

    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0)  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Movement ledger and valuation configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # Attempts for a batch that loses a balance version race or the write lock
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.05, ge=0)
    retry_multiplier: float = Field(default=2.0, ge=1)

    # Allowed drift between total_value and quantity * avg_unit_cost
    value_tolerance: Decimal = Field(default=Decimal("0.01"), ge=0)

    # Reject adjustments whose system quantity differs from the live balance
    strict_adjustment_counts: bool = True

    # Minimum digits of the sequence part in PREFIX-YEAR-NNN
    number_padding: int = Field(default=3, ge=1, le=9)


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # Unset means console output in development and JSON elsewhere
    log_format: Literal["console", "json"] | None = None

    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    api: APISettings = Field(default_factory=APISettings)

    @property
    def json_logs(self) -> bool:
        if self.log_format is not None:
            return self.log_format == "json"
        return self.environment != "development"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
