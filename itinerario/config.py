"""Runtime settings loaded from environment variables or a ``.env`` file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ITINERARIO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Itinerario"
    geocoder_user_agent: str = Field(
        default="itinerario_app",
        description="User agent sent to Nominatim, required by its usage policy.",
    )
    geocode_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocode_retry_timeout_seconds: float = Field(default=20.0, gt=0.0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    map_zoom_start: int = Field(default=12, ge=1, le=18)


settings = Settings()
