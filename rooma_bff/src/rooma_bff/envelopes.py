# src/rooma_bff/envelopes.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel

# Longest slice of an unparsable upstream body echoed back to the caller
RAW_PREVIEW_LIMIT = 200


class EnvelopeKind(str, Enum):
    UPSTREAM_MALFORMED_RESPONSE = "upstream_malformed_response"
    TRANSPORT_FAILURE = "transport_failure"


class ProxyErrorEnvelope(BaseModel):
    """
    The single failure shape the BFF emits when it cannot hand back upstream JSON.
    `kind` tells the client which failure happened; the optional fields are only
    serialized when set.
    """
    kind: EnvelopeKind
    error: str
    status: int
    message: Optional[str] = None
    raw: Optional[str] = None
    cause: Optional[str] = None

    @classmethod
    def malformed(cls, status: int, text: str) -> "ProxyErrorEnvelope":
        return cls(
            kind=EnvelopeKind.UPSTREAM_MALFORMED_RESPONSE,
            error=f"Upstream non-JSON response ({status})",
            raw=text[:RAW_PREVIEW_LIMIT],
            status=status,
        )

    @classmethod
    def transport_failure(cls, label: str, status: int, exc: BaseException) -> "ProxyErrorEnvelope":
        underlying = exc.__cause__ or exc.__context__
        return cls(
            kind=EnvelopeKind.TRANSPORT_FAILURE,
            error=f"{label} proxy failed",
            message=str(exc) or type(exc).__name__,
            cause=str(underlying) if underlying else None,
            status=status,
        )

    def to_content(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
