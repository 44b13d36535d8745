"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode.
        database_url: Database connection URL.
        cron_secret_key: Shared secret for cron endpoints (empty = no auth).
        import_session_retention_days: Age after which finished import
            sessions are swept from memory.
        import_field_aliases: Extra CSV header aliases per canonical contact
            field, merged into the built-in alias table.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "JobDock"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Database
    database_url: str = "sqlite:///./jobdock.db"

    # CORS (for future API clients)
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Cron/scheduler settings
    cron_secret_key: str = ""

    # Contact import
    import_session_retention_days: int = Field(default=7, ge=0)
    # JSON object in the environment, e.g. {"phone": ["cell #"]}
    import_field_aliases: dict[str, list[str]] = Field(default_factory=dict)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
