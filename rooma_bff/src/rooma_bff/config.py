# src/rooma_bff/config.py

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# .env lives at the service root, two levels up from src/rooma_bff/
CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=False)
    logger.info(f"Rooma-BFF: Loaded .env file from: {ENV_FILE_PATH}")
else:
    logger.debug(f"Rooma-BFF: No .env file at {ENV_FILE_PATH}. Relying on environment variables.")


class Settings(BaseSettings):
    # === Upstream identity service ===
    BACKEND_API_URL: str = "http://localhost:5001/api"
    # None disables the httpx timeout entirely
    UPSTREAM_TIMEOUT_SECONDS: Optional[float] = 30.0

    # === Diagnostics ===
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("BACKEND_API_URL", mode='before')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("BACKEND_API_URL must not be empty.")
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode='before')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    def upstream_url(self, suffix: str) -> str:
        return f"{self.BACKEND_API_URL}/{suffix.lstrip('/')}"


settings = Settings()
