"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 5000
    cors_origins: list[str] = ["*"]
    debug: bool = False

    # ── Learning-data backend ────────────────────────────────
    learning_data_base_url: str = "http://localhost:8080"
    learning_data_api_prefix: str = "/api"
    learning_data_access_token: str = ""
    learning_data_timeout: int = 15  # seconds
    use_mock_data: bool = False  # only honoured when debug=True

    # ── Risk engine ──────────────────────────────────────────
    default_time_window_days: int = 30
    default_grade_level: int = 5
    cohort_max_concurrency: int = 10  # concurrent metric fetches per process


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
