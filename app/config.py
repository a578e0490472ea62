"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file and override existing env vars
load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # GitHub Actions
    github_token: str = Field(default="")
    github_owner: str = "abdelbaki-nazim"
    github_repo: str = "workflows"
    github_workflow: str = "deploy.yml"
    github_ref: str = "main"
    github_api_base: str = "https://api.github.com"
    github_timeout: float = 10.0

    # Run polling
    poll_interval_seconds: float = Field(default=3.0, ge=0)
    max_poll_attempts: int = Field(default=20, ge=1)
    outputs_marker: str = "DEPLOYMENT_OUTPUTS="
    run_ttl_hours: int = 24

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_file: str | None = None

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
