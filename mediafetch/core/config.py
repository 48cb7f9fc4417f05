# mediafetch/core/config.py
from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---- App ----
    APP_NAME: str = "Media Fetch API"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # ---- External tool ----
    YTDLP_PATH: str = "yt-dlp"
    TEMP_BASENAME: str = "temp_media"
    SHUTDOWN_GRACE_SECONDS: float = 3.0

    # ---- Storage ----
    DOWNLOAD_DIR: str = "downloads"
    PUBLIC_DIR: str = "public"

    # ---- CORS ----
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        """
        Allow both a comma-separated string and a proper JSON list.
        CORS_ORIGINS=http://localhost:3000,https://example.com
        """
        if isinstance(v, str) and v:
            return [o.strip() for o in v.split(",")]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
