# src/rooma_client/session_data.py

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .config import ClientSettings
from .local_storage import LocalStorage
from .token_storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, CookieJarStorage

logger = logging.getLogger(__name__)


class SessionData(BaseModel):
    """
    Represents the credentials held for the current browser session.
    Both tokens are set together or not at all; no tokens means anonymous.
    """
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None  # Last profile returned by /auth/me


class Session:
    """
    Owns the token pair and is the only writer of the persisted credentials.
    `init` picks up what a previous run left behind; `teardown` forgets everything.
    """

    def __init__(
            self,
            cookies: CookieJarStorage,
            access_ttl_days: float = 7,
            refresh_ttl_days: float = 30,
    ):
        self.cookies = cookies
        self.access_ttl_days = access_ttl_days
        self.refresh_ttl_days = refresh_ttl_days
        self.data = SessionData()

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "Session":
        cookies = CookieJarStorage(LocalStorage(settings.STORAGE_PATH))
        return cls(
            cookies,
            access_ttl_days=settings.ACCESS_TOKEN_TTL_DAYS,
            refresh_ttl_days=settings.REFRESH_TOKEN_TTL_DAYS,
        )

    @property
    def access_token(self) -> Optional[str]:
        return self.data.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self.data.refresh_token

    @property
    def is_authenticated(self) -> bool:
        return self.data.access_token is not None

    def init(self) -> "Session":
        access_token = self.cookies.get(ACCESS_TOKEN_KEY)
        refresh_token = self.cookies.get(REFRESH_TOKEN_KEY)
        if access_token and refresh_token:
            self.data = SessionData(access_token=access_token, refresh_token=refresh_token)
        elif access_token or refresh_token:
            logger.info("Session: Found only one persisted token, starting anonymous")
            self.teardown()
        else:
            self.data = SessionData()
        return self

    def establish(self, access_token: str, refresh_token: str) -> None:
        if not access_token or not refresh_token:
            raise ValueError("A session needs both an access token and a refresh token.")
        self.cookies.set(ACCESS_TOKEN_KEY, access_token, expires_days=self.access_ttl_days)
        self.cookies.set(REFRESH_TOKEN_KEY, refresh_token, expires_days=self.refresh_ttl_days)
        self.data = SessionData(access_token=access_token, refresh_token=refresh_token)

    def rotate(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """
        Swaps in a refreshed access token. The refresh entry is only rewritten when the token
        changed, so its expiry keeps counting from when it was issued.
        """
        if not access_token:
            raise ValueError("Cannot rotate to an empty access token.")
        next_refresh = refresh_token or self.data.refresh_token
        if not next_refresh:
            raise ValueError("Cannot rotate a session that has no refresh token.")
        self.cookies.set(ACCESS_TOKEN_KEY, access_token, expires_days=self.access_ttl_days)
        if refresh_token and refresh_token != self.data.refresh_token:
            self.cookies.set(REFRESH_TOKEN_KEY, refresh_token, expires_days=self.refresh_ttl_days)
        self.data = self.data.model_copy(update={"access_token": access_token, "refresh_token": next_refresh})

    def remember_user(self, user: Optional[Dict[str, Any]]) -> None:
        self.data = self.data.model_copy(update={"user": user})

    def teardown(self) -> None:
        self.cookies.remove(ACCESS_TOKEN_KEY)
        self.cookies.remove(REFRESH_TOKEN_KEY)
        self.data = SessionData()
