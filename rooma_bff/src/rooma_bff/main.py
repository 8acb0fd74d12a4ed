# src/rooma_bff/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, Header, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .envelopes import ProxyErrorEnvelope
from .proxy_utils import NO_STORE_HEADERS, get_upstream_client, proxy

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("--- Rooma-BFF (FastAPI) Starting Up ---")
    logger.info(f"Identity service base URL: {settings.BACKEND_API_URL}")
    logger.info(f"Upstream timeout (s): {settings.UPSTREAM_TIMEOUT_SECONDS}")
    logger.info("-------------------------------------------")
    yield
    logger.info("--- Rooma-BFF shutting down ---")


# --- FastAPI App Setup ---
app = FastAPI(
    title="Rooma-BFF API",
    description="Backend-For-Frontend for the Rooma web app, proxying credential calls to the identity service.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Last line of defence: the browser only ever sees the envelope shape, never a bare 500 page.
    """
    logger.exception(f"BFF: Unhandled error on {request.method} {request.url.path}")
    envelope = ProxyErrorEnvelope.transport_failure(
        "Request", status.HTTP_500_INTERNAL_SERVER_ERROR, exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope.to_content(),
        headers=NO_STORE_HEADERS,
    )


# --- Auth proxy routes ---
auth_router = APIRouter()


@auth_router.post("/register")
async def register(request: Request, client: httpx.AsyncClient = Depends(get_upstream_client)) -> Response:
    body = await request.body()
    return await proxy(
        client, "POST", "auth/register",
        label="Register", fallback_status=status.HTTP_502_BAD_GATEWAY, body=body,
    )


@auth_router.post("/login")
async def login(request: Request, client: httpx.AsyncClient = Depends(get_upstream_client)) -> Response:
    body = await request.body()
    return await proxy(
        client, "POST", "auth/login",
        label="Login", fallback_status=status.HTTP_502_BAD_GATEWAY, body=body,
    )


@auth_router.post("/refresh")
async def refresh(request: Request, client: httpx.AsyncClient = Depends(get_upstream_client)) -> Response:
    body = await request.body()
    return await proxy(
        client, "POST", "auth/refresh-token",
        label="Token refresh", fallback_status=status.HTTP_500_INTERNAL_SERVER_ERROR, body=body,
    )


@auth_router.post("/logout")
async def logout(client: httpx.AsyncClient = Depends(get_upstream_client)) -> Response:
    return await proxy(
        client, "POST", "auth/logout",
        label="Logout", fallback_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@auth_router.get("/me")
async def me(
        authorization: Optional[str] = Header(None),
        client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    return await proxy(
        client, "GET", "auth/me",
        label="Get user", fallback_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        authorization=authorization or "",
    )


app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])


@app.get("/")
async def home():
    return {"message": "Rooma BFF is running!"}
