# src/rooma_client/config.py

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=False)
    logger.info(f"Rooma-Client: Loaded .env file from: {ENV_FILE_PATH}")

DEFAULT_STORAGE_PATH = Path.home() / ".rooma" / "local_storage.json"


class ClientSettings(BaseSettings):
    # Domain REST API (properties, bookings, reviews, ...)
    API_BASE_URL: str = "http://localhost:5001/api"
    # BFF serving /auth/*; co-located with the UI
    AUTH_BASE_URL: str = "http://localhost:3000/api"

    # === Durable local storage ===
    STORAGE_PATH: Path = DEFAULT_STORAGE_PATH

    # === Credential storage expirations (days) ===
    ACCESS_TOKEN_TTL_DAYS: int = 7
    REFRESH_TOKEN_TTL_DAYS: int = 30

    REQUEST_TIMEOUT_SECONDS: Optional[float] = 30.0

    model_config = SettingsConfigDict(
        env_prefix="ROOMA_",
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("API_BASE_URL", "AUTH_BASE_URL", mode='before')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v

    @field_validator("STORAGE_PATH")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("ACCESS_TOKEN_TTL_DAYS", "REFRESH_TOKEN_TTL_DAYS")
    @classmethod
    def positive_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Token TTLs must be a positive number of days.")
        return v
