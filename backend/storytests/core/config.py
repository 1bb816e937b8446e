"""
Configuration settings for the User Story to Tests service.

This module handles all configuration through environment variables
with sensible defaults for development.
"""

from typing import Optional, List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "User Story to Tests"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # API settings
    API_PREFIX: str = "/api"

    # Generation service settings (any OpenAI-compatible chat completions API)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = "https://api.groq.com/openai/v1"
    OPENAI_MODEL: str = "llama-3.3-70b-versatile"
    OPENAI_MAX_TOKENS: int = 4000
    OPENAI_TEMPERATURE: float = 0.2
    GENERATION_TIMEOUT_SECONDS: float = 60.0

    # Jira settings
    JIRA_BASE_URL: Optional[str] = None
    JIRA_EMAIL: Optional[str] = None
    JIRA_API_TOKEN: Optional[str] = None
    JIRA_TIMEOUT_SECONDS: float = 15.0

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE: Optional[str] = None

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v):
        """Normalise the prefix to '' or '/segment' without a trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def jira_configured(self) -> bool:
        """Jira integration needs the base URL, account email and API token together."""
        return all([self.JIRA_BASE_URL, self.JIRA_EMAIL, self.JIRA_API_TOKEN])

    @property
    def generation_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)


# Global settings instance
settings = Settings()
