from datetime import datetime, timezone

import httpx
import pytest

from rooma_client.api_client import ApiClient
from rooma_client.config import ClientSettings
from rooma_client.local_storage import LocalStorage
from rooma_client.session_data import Session
from rooma_client.token_storage import CookieJarStorage

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
API_BASE = "http://api.test/api"
AUTH_BASE = "http://bff.test/api"


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def cookies(storage, clock):
    return CookieJarStorage(storage, clock=clock)


@pytest.fixture
def session(cookies):
    return Session(cookies, access_ttl_days=7, refresh_ttl_days=30).init()


@pytest.fixture
def client_settings(tmp_path):
    return ClientSettings(
        API_BASE_URL=API_BASE,
        AUTH_BASE_URL=AUTH_BASE,
        STORAGE_PATH=tmp_path / "local_storage.json",
    )


@pytest.fixture
def make_client(session, client_settings):
    """Builds an ApiClient whose requests are answered by `handler`."""

    def _make(handler) -> ApiClient:
        return ApiClient(session, settings=client_settings, transport=httpx.MockTransport(handler))

    return _make
