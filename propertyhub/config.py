"""Application configuration from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./propertyhub.db",
        description="SQLAlchemy connection string",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file path")

    # Billing
    currency: str = Field(default="USD", description="Currency code for invoice amounts")

    # API
    api_title: str = Field(default="PropertyHub API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


# Global settings instance
settings = Settings()
