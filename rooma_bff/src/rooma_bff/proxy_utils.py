# src/rooma_bff/proxy_utils.py

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Union

import httpx
from fastapi.responses import JSONResponse, Response

from .config import settings
from .envelopes import ProxyErrorEnvelope

logger = logging.getLogger(__name__)

# Every proxied call must reach the identity service fresh
NO_STORE_HEADERS = {"Cache-Control": "no-store"}
# HTTP forbids a body on these, so there is nothing to normalize
BODILESS_STATUSES = frozenset({204, 304})


# --- Upstream outcomes ---

@dataclass(frozen=True)
class UpstreamJson:
    status: int
    payload: Any


@dataclass(frozen=True)
class UpstreamMalformed:
    status: int
    text: str


@dataclass(frozen=True)
class UpstreamEmpty:
    status: int


@dataclass(frozen=True)
class UpstreamUnreachable:
    error: Exception


UpstreamOutcome = Union[UpstreamJson, UpstreamMalformed, UpstreamEmpty, UpstreamUnreachable]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def classify_reply(status_code: int, text: str) -> UpstreamOutcome:
    """Turns an upstream status and body text into a JSON or malformed outcome."""
    if status_code in BODILESS_STATUSES:
        return UpstreamEmpty(status=status_code)
    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return UpstreamMalformed(status=status_code, text=text)
    return UpstreamJson(status=status_code, payload=payload)


# --- Upstream client ---

async def get_upstream_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency: one short-lived client per proxied request."""
    async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS) as client:
        yield client


async def call_upstream(
        client: httpx.AsyncClient,
        method: str,
        suffix: str,
        body: Optional[bytes] = None,
        authorization: Optional[str] = None,
) -> UpstreamOutcome:
    """
    Forwards one call to the identity service.
    The body is sent as the raw bytes received from the browser, never re-encoded.
    Never raises: anything that prevents a response from arriving becomes UpstreamUnreachable.
    """
    url = settings.upstream_url(suffix)
    headers = dict(NO_STORE_HEADERS)
    if body is not None:
        headers["Content-Type"] = "application/json"
    if authorization is not None:
        headers["Authorization"] = authorization

    try:
        logger.debug(f"BFF: Forwarding {method} to {url}")
        response = await client.request(method, url, content=body, headers=headers)
        text = response.text
    except httpx.HTTPError as e:
        logger.error(f"BFF: Could not reach identity service at {url}: {e!r}")
        return UpstreamUnreachable(error=e)
    except Exception as e_gen:
        logger.exception(f"BFF: Unexpected error while calling {url}")
        return UpstreamUnreachable(error=e_gen)

    outcome = classify_reply(response.status_code, text)
    if isinstance(outcome, UpstreamMalformed):
        logger.warning(f"BFF: Identity service answered {url} with non-JSON ({response.status_code})")
    return outcome


# --- Outcome -> HTTP response ---

def outcome_to_response(outcome: UpstreamOutcome, label: str, fallback_status: int) -> Response:
    """
    Renders an outcome for the browser. Upstream JSON goes back verbatim at the upstream
    status; every other outcome becomes a ProxyErrorEnvelope.
    """
    if isinstance(outcome, UpstreamJson):
        return JSONResponse(content=outcome.payload, status_code=outcome.status, headers=NO_STORE_HEADERS)
    if isinstance(outcome, UpstreamEmpty):
        return Response(status_code=outcome.status, headers=NO_STORE_HEADERS)
    if isinstance(outcome, UpstreamMalformed):
        envelope = ProxyErrorEnvelope.malformed(outcome.status, outcome.text)
        return JSONResponse(content=envelope.to_content(), status_code=outcome.status, headers=NO_STORE_HEADERS)
    if isinstance(outcome, UpstreamUnreachable):
        envelope = ProxyErrorEnvelope.transport_failure(label, fallback_status, outcome.error)
        return JSONResponse(content=envelope.to_content(), status_code=fallback_status, headers=NO_STORE_HEADERS)
    raise TypeError(f"Unknown upstream outcome: {outcome!r}")


async def proxy(
        client: httpx.AsyncClient,
        method: str,
        suffix: str,
        label: str,
        fallback_status: int,
        body: Optional[bytes] = None,
        authorization: Optional[str] = None,
) -> Response:
    outcome = await call_upstream(client, method, suffix, body=body, authorization=authorization)
    return outcome_to_response(outcome, label=label, fallback_status=fallback_status)
