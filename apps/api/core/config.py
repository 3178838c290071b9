"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
Scoring constants live with the health metrics engine, not here.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_RELOAD: bool = Field(default=False)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Health metrics request bounds
    # The engine reads at most the last 90 records of a history
    HEALTH_METRICS_MAX_HISTORY_RECORDS: int = Field(default=400, ge=1, le=3660)
    # Default number of days returned by the score-history endpoint.
    HEALTH_METRICS_SCORE_HISTORY_DAYS: int = Field(default=7, ge=1, le=90)

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    EXPOSE_API_DOCS: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    CORS_ORIGINS: Optional[str] = Field(default=None)


# Global settings instance
settings = Settings()
