# src/rooma_client/token_storage.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CookieEntry(BaseModel):
    value: str
    expires_at: datetime


class CookieJarStorage:
    """Named credential entries with their own expirations, kept in durable local storage."""

    def __init__(self, storage: LocalStorage, clock: Callable[[], datetime] = utc_now):
        self.storage = storage
        self.clock = clock

    def set(self, name: str, value: str, expires_days: float) -> CookieEntry:
        entry = CookieEntry(value=value, expires_at=self.clock() + timedelta(days=expires_days))
        self.storage.set_item(name, entry.model_dump_json())
        return entry

    def get_entry(self, name: str) -> Optional[CookieEntry]:
        stored = self.storage.get_item(name)
        if stored is None:
            return None
        try:
            entry = CookieEntry.model_validate_json(stored)
        except ValidationError:
            logger.warning(f"TokenStorage: Dropping unreadable entry '{name}'")
            self.storage.remove_item(name)
            return None
        if entry.expires_at <= self.clock():
            self.storage.remove_item(name)
            return None
        return entry

    def get(self, name: str) -> Optional[str]:
        entry = self.get_entry(name)
        return entry.value if entry else None

    def remove(self, name: str) -> None:
        self.storage.remove_item(name)
