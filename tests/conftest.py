"""Pytest configuration and fixtures for TaskTrack tests."""

from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.main import create_app
from config import Settings, get_settings_for_testing
from core.security import PasswordHasher, TokenAuthority

TEST_SECRET = "test-secret-key-0123456789abcdef"


# =============================================================================
# Settings and Components
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory app with fast hashing."""
    return get_settings_for_testing(
        jwt_secret_key=TEST_SECRET,
        storage_backend="memory",
        bcrypt_rounds=4,
        rate_limit_enabled=False,
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    """Provide a low-cost password hasher."""
    return PasswordHasher(rounds=4)


class FakeClock:
    """Controllable clock for token tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock frozen at a fixed instant."""
    return FakeClock(datetime(2025, 1, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_authority(clock: FakeClock) -> TokenAuthority:
    """Provide a token authority with a one-hour lifetime and a fake clock."""
    return TokenAuthority(TEST_SECRET, expires_delta=timedelta(minutes=60), clock=clock)


# =============================================================================
# FastAPI App Fixtures
# =============================================================================


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Create a fresh application backed by in-memory stores."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create test client for the app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client: TestClient) -> Callable[..., dict[str, str]]:
    """
    Register and log in a user, returning Authorization headers.

    Usage:
        headers = auth_headers("alice")
    """

    def _auth_headers(username: str, password: str = "s3cret-pw") -> dict[str, str]:
        response = client.post("/register", json={"username": username, "password": password})
        assert response.status_code == 201, response.text

        response = client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text

        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _auth_headers
