# src/rooma_client/auth_api.py

import json
import logging
from typing import Any, Dict, Mapping, Optional

from .api_client import ApiClient
from .results import (
    RAW_PREVIEW_LIMIT,
    ApiError,
    MalformedResponseError,
    Success,
    UpstreamMalformedResponse,
    error_for,
    unwrap,
)
from .session_data import Session

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Credential operations for the UI: register, login, logout, refresh and "who am I".

    States: anonymous -> authenticated on register/login; back to anonymous on logout
    (always) or when the identity service rejects the refresh token; authenticated ->
    authenticated with a rotated access token on a successful refresh. A refresh with a
    caller-supplied token also signs an anonymous session in.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def session(self) -> Session:
        return self.client.session

    def _store_tokens(self, status: int, response: Any) -> None:
        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, dict):
            return
        access_token = data.get("accessToken")
        if not access_token:
            return
        refresh_token = data.get("refreshToken")
        if not refresh_token:
            logger.error("SessionManager: Auth response carried an access token without a refresh token")
            raise MalformedResponseError(UpstreamMalformedResponse(
                status=status,
                error="Auth response carried an access token without a refresh token",
                raw=json.dumps(response)[:RAW_PREVIEW_LIMIT],
            ))
        self.session.establish(access_token, refresh_token)
        if isinstance(data.get("user"), dict):
            self.session.remember_user(data["user"])

    async def register(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        result = await self.client.post("/auth/register", json=dict(data), authenticate=False)
        response = unwrap(result)
        self._store_tokens(result.status, response)
        logger.info("SessionManager: Registration succeeded")
        return response

    async def login(self, credentials: Mapping[str, Any]) -> Dict[str, Any]:
        result = await self.client.post("/auth/login", json=dict(credentials), authenticate=False)
        response = unwrap(result)
        self._store_tokens(result.status, response)
        logger.info("SessionManager: Login succeeded")
        return response

    async def logout(self) -> None:
        """Tells the server, then forgets the tokens whatever the server said."""
        try:
            result = await self.client.post("/auth/logout")
            if not result.ok:
                logger.warning(f"SessionManager: Logout call failed, clearing tokens anyway: {result.describe()}")
        finally:
            self.session.teardown()

    async def get_current_user(self) -> Any:
        return unwrap(await self.client.get("/auth/me"))

    async def load_user(self) -> Optional[Dict[str, Any]]:
        """
        Restores the signed-in user for a fresh UI: anonymous stays anonymous, a session the
        server no longer honours is torn down.
        """
        if not self.session.is_authenticated:
            return None
        try:
            response = await self.get_current_user()
        except ApiError as e:
            logger.error(f"SessionManager: Failed to load user: {e}")
            self.session.teardown()
            return None
        user = response.get("data") if isinstance(response, dict) else None
        self.session.remember_user(user if isinstance(user, dict) else None)
        return self.session.data.user

    async def refresh_token(self, refresh_token: Optional[str] = None) -> Dict[str, str]:
        """
        Obtains a new access token and stores it in the session before returning it.
        Raises ApiError on failure; a rejected refresh token also ends the session.
        """
        result = await self.client.refresh_access_token(refresh_token)
        if not isinstance(result, Success):
            raise error_for(result)
        return {"accessToken": self.session.access_token}
