# src/rooma_client/api_client.py

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import ClientSettings
from .results import (
    RAW_PREVIEW_LIMIT,
    ApiResult,
    Success,
    TransportFailure,
    UpstreamMalformedResponse,
    UpstreamStructuredError,
    classify_response,
)
from .session_data import Session

logger = logging.getLogger(__name__)

AUTH_ROUTE_PREFIX = "/auth/"
REFRESH_PATH = "/auth/refresh"
# Credential calls themselves never trigger a refresh-and-retry
NO_RETRY_PATHS = frozenset({"/auth/login", "/auth/register", "/auth/logout", REFRESH_PATH})


def _normalize_path(path: str) -> str:
    return "/" + path.lstrip("/")


def is_auth_route(path: str) -> bool:
    return _normalize_path(path).startswith(AUTH_ROUTE_PREFIX)


class ApiClient:
    """
    The one outbound HTTP client shared by every domain API module.

    - resolves the base URL per call (BFF for /auth/*, REST API otherwise)
    - attaches `Authorization: Bearer <access token>` from the injected Session
    - classifies every reply into a tagged result instead of raising
    - on a 401 it refreshes once, through a single in-flight refresh, and retries
    """

    def __init__(
            self,
            session: Session,
            settings: Optional[ClientSettings] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.settings = settings or ClientSettings()
        self._transport = transport
        self._refresh_task: Optional["asyncio.Task[ApiResult]"] = None

    # --- URL / header construction ---

    def resolve_url(self, path: str) -> str:
        path = _normalize_path(path)
        base = self.settings.AUTH_BASE_URL if is_auth_route(path) else self.settings.API_BASE_URL
        return f"{base}{path}"

    @staticmethod
    def _headers_for(token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    # --- Wire ---

    async def _send(
            self,
            method: str,
            url: str,
            headers: Dict[str, str],
            params: Optional[Mapping[str, Any]] = None,
            json_body: Any = None,
            files: Optional[Mapping[str, Any]] = None,
    ) -> ApiResult:
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            async with httpx.AsyncClient(
                    transport=self._transport, timeout=self.settings.REQUEST_TIMEOUT_SECONDS
            ) as client:
                response = await client.request(
                    method, url, headers=headers, params=params or None, json=json_body, files=files
                )
        except httpx.HTTPError as e:
            logger.error(f"ApiClient: Request error calling {method} {url}: {e!r}")
            underlying = e.__cause__ or e.__context__
            return TransportFailure(
                error=f"Could not reach {url}",
                message=str(e) or type(e).__name__,
                cause=str(underlying) if underlying else None,
            )
        result = classify_response(response.status_code, response.text)
        if not result.ok:
            logger.debug(f"ApiClient: {method} {url} -> {type(result).__name__} ({response.status_code})")
        return result

    async def request(
            self,
            method: str,
            path: str,
            params: Optional[Mapping[str, Any]] = None,
            json: Any = None,
            files: Optional[Mapping[str, Any]] = None,
            authenticate: bool = True,
    ) -> ApiResult:
        path = _normalize_path(path)
        url = self.resolve_url(path)
        sent_token = self.session.access_token if authenticate else None
        result = await self._send(method, url, self._headers_for(sent_token), params, json, files)

        needs_refresh = (
            isinstance(result, UpstreamStructuredError)
            and result.status == 401
            and sent_token is not None
            and path not in NO_RETRY_PATHS
        )
        if needs_refresh and self.session.refresh_token is None:
            # Another call's refresh was rejected while this one was in flight
            logger.info(f"ApiClient: {method} {path} was rejected with 401 and the session has ended")
            return result
        if needs_refresh:
            logger.info(f"ApiClient: {method} {path} was rejected with 401, refreshing access token")
            refreshed = await self.refresh_access_token()
            if isinstance(refreshed, Success):
                result = await self._send(
                    method, url, self._headers_for(self.session.access_token), params, json, files
                )
        return result

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs) -> ApiResult:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> ApiResult:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> ApiResult:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs) -> ApiResult:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> ApiResult:
        return await self.request("DELETE", path, **kwargs)

    # --- Refresh ---

    async def refresh_access_token(self, refresh_token: Optional[str] = None) -> ApiResult:
        """
        Exchanges the refresh token for a new access token and stores it in the session.
        Concurrent callers share the refresh already in flight instead of starting their own.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            logger.debug("ApiClient: Joining refresh already in flight")
        else:
            token = refresh_token or self.session.refresh_token
            if not token:
                raise ValueError("Missing refresh token")
            self._refresh_task = asyncio.ensure_future(self._run_refresh(token))
        # shield: one waiter being cancelled must not cancel the refresh for the others
        return await asyncio.shield(self._refresh_task)

    async def _run_refresh(self, refresh_token: str) -> ApiResult:
        result = await self._send(
            "POST", self.resolve_url(REFRESH_PATH), self._headers_for(None),
            json_body={"refreshToken": refresh_token},
        )

        if isinstance(result, Success):
            data = result.payload.get("data") if isinstance(result.payload, dict) else None
            access_token = data.get("accessToken") if isinstance(data, dict) else None
            if not access_token:
                logger.error("ApiClient: Refresh succeeded without an access token in the response")
                return UpstreamMalformedResponse(
                    status=result.status,
                    error="Refresh response carried no access token",
                    raw=json.dumps(result.payload)[:RAW_PREVIEW_LIMIT],
                )
            # Without rotation the token just sent stays valid, even when it came from the caller
            next_refresh = data.get("refreshToken") or refresh_token
            if self.session.is_authenticated:
                self.session.rotate(access_token, next_refresh)
            else:
                self.session.establish(access_token, next_refresh)
            logger.info("ApiClient: Access token refreshed")
        elif isinstance(result, UpstreamStructuredError) and 400 <= result.status < 500:
            # The identity service rejected the refresh token; nothing left to retry with
            logger.info(f"ApiClient: Refresh rejected ({result.status}), ending session")
            self.session.teardown()
        else:
            logger.warning(f"ApiClient: Refresh failed, keeping session: {result.describe()}")
        return result
