"""Configuration module using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings, read from PAYMENTS_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    num_workers: int = Field(
        default=4, ge=0, description="Worker threads processing client batches; 0 or 1 runs sequentially"
    )
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="WARNING", description="Logging level"
    )
    log_format: str = Field(
        default="%(levelname)s: %(message)s", description="Format string for log records"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def get_settings() -> Settings:
    return Settings()
