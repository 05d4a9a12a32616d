"""Application configuration."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cbgains.services.coinbase.client import (
    COINBASE_API_URL,
    COINBASE_API_VERSION,
    CoinbaseCredentials,
)

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """Application settings, read from the environment and .env."""

    # Coinbase API key
    coinbase_key: str = ""
    coinbase_secret: str = ""

    # Coinbase API
    coinbase_api_url: str = COINBASE_API_URL
    coinbase_api_version: str = COINBASE_API_VERSION
    http_timeout: float = Field(30.0, gt=0)
    page_limit: int = Field(100, gt=0)

    # Reporting window when no --since/--all is given
    default_window_days: int = Field(28, ge=0, le=36500)

    # Application
    log_level: LogLevel = "WARNING"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def has_credentials(self) -> bool:
        return bool(self.coinbase_key and self.coinbase_secret)

    def coinbase_credentials(self) -> CoinbaseCredentials:
        return CoinbaseCredentials(api_key=self.coinbase_key, api_secret=self.coinbase_secret)
