# src/rooma_client/results.py

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

RAW_PREVIEW_LIMIT = 200

# Envelope tags emitted by the BFF
MALFORMED_ENVELOPE_KIND = "upstream_malformed_response"
TRANSPORT_ENVELOPE_KIND = "transport_failure"


# --- Tagged results ---

@dataclass(frozen=True)
class Success:
    status: int
    payload: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class UpstreamStructuredError:
    """The server answered with JSON and a non-2xx status."""
    status: int
    payload: Any

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        if isinstance(self.payload, dict):
            parts = [self.payload.get(key) for key in ("error", "message", "cause")]
            details = " | ".join(str(part) for part in parts if part)
            if details:
                return details
        return f"Request failed with status {self.status}"


@dataclass(frozen=True)
class UpstreamMalformedResponse:
    """The server answered with something that is not JSON."""
    status: int
    error: str
    raw: str = ""

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return self.error


@dataclass(frozen=True)
class TransportFailure:
    """
    No usable answer arrived. `status` is the BFF fallback status when the BFF reported it,
    or None when the call failed on this side of the wire.
    """
    error: str
    status: Optional[int] = None
    message: Optional[str] = None
    cause: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return " | ".join(part for part in (self.error, self.message, self.cause) if part)


Failure = Union[UpstreamStructuredError, UpstreamMalformedResponse, TransportFailure]
ApiResult = Union[Success, UpstreamStructuredError, UpstreamMalformedResponse, TransportFailure]


# --- Exceptions ---

class ApiError(Exception):
    def __init__(self, result: Failure):
        self.result = result
        super().__init__(result.describe())

    @property
    def status(self) -> Optional[int]:
        return self.result.status


class UpstreamError(ApiError):
    @property
    def payload(self) -> Any:
        return self.result.payload


class MalformedResponseError(ApiError):
    pass


class TransportError(ApiError):
    pass


def error_for(result: Failure) -> ApiError:
    if isinstance(result, UpstreamStructuredError):
        return UpstreamError(result)
    if isinstance(result, UpstreamMalformedResponse):
        return MalformedResponseError(result)
    if isinstance(result, TransportFailure):
        return TransportError(result)
    raise TypeError(f"Not a failure result: {result!r}")


def unwrap(result: ApiResult) -> Any:
    """Returns the payload of a Success, raises the matching ApiError for anything else."""
    if isinstance(result, Success):
        return result.payload
    raise error_for(result)


# --- Classification ---

def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def classify_response(status_code: int, text: str) -> ApiResult:
    is_success = 200 <= status_code < 300
    if is_success and not text.strip():
        return Success(status=status_code, payload=None)

    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        preview = " ".join(text[:RAW_PREVIEW_LIMIT].split())
        return UpstreamMalformedResponse(
            status=status_code,
            error=f"Expected JSON response, got non-JSON ({status_code}): {preview}",
            raw=text[:RAW_PREVIEW_LIMIT],
        )

    # The BFF keeps the upstream status on a malformed reply, so an envelope can arrive with a 2xx
    kind = payload.get("kind") if isinstance(payload, dict) else None
    if kind == MALFORMED_ENVELOPE_KIND:
        return UpstreamMalformedResponse(
            status=status_code,
            error=payload.get("error") or f"Upstream non-JSON response ({status_code})",
            raw=payload.get("raw") or "",
        )
    if kind == TRANSPORT_ENVELOPE_KIND:
        return TransportFailure(
            error=payload.get("error") or "Proxy failed",
            status=status_code,
            message=payload.get("message"),
            cause=payload.get("cause"),
        )
    if is_success:
        return Success(status=status_code, payload=payload)
    return UpstreamStructuredError(status=status_code, payload=payload)
