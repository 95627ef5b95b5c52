# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
The store connection string lives in ``lossrun_db.config``.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[5]
_ENV_FILE = _PROJECT_ROOT / ".env"


class AppEntry(BaseModel):
    """One entry of the application registry."""

    app_id: str
    app_name: str
    description: str = ""
    color: str = "#4285F4"
    status: str = "active"
    database: str = ""


DEFAULT_APP_REGISTRY: list[AppEntry] = [
    AppEntry(
        app_id="loss-run-intelligence",
        app_name="Loss Run Intelligence",
        description="Insurance loss run processing & analytics",
        color="#4285F4",
        status="active",
        database="TM-LOSSRUN",
    ),
]


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "lossrun-analytics"
    ENVIRONMENT: str = Field(
        default="production",
        description="'development' exposes exception messages in 500 responses.",
    )
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # -- Server --
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    API_PREFIX: str = "/api/analytics"

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:3000"]

    # -- Queries --
    MAX_QUERY_LIMIT: int = Field(
        default=1000,
        description="Upper bound applied to any ?limit= parameter.",
    )

    # -- Registry --
    APP_REGISTRY: list[AppEntry] = Field(
        default_factory=lambda: list(DEFAULT_APP_REGISTRY),
        description="Known applications, as a JSON list of AppEntry objects.",
    )

    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() == "development"


settings = Settings()
