import os

# Settings are read at import time; pin them before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test_secret_key")
os.environ.setdefault("FRONTEND_ORIGIN", "http://localhost:5173")

from typing import Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
from starlette.responses import RedirectResponse

# Import models so they register with SQLModel metadata.
from taskforge import models  # noqa: F401
from taskforge.auth.providers import (
    GITHUB,
    GOOGLE,
    AuthProviderClient,
    ProviderFailure,
    get_provider_client,
)
from taskforge.core.database import get_session
from taskforge.schemas.auth import AuthPayload


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def db_session(db_engine):
    # The in-memory DB outlives a single test under StaticPool; reset schema per test.
    SQLModel.metadata.drop_all(db_engine)
    SQLModel.metadata.create_all(db_engine)
    with Session(db_engine) as session:
        yield session


class FakeProviderClient(AuthProviderClient):
    """Stands in for the real providers; tests queue payloads or failures."""

    def __init__(self) -> None:
        self.payloads: Dict[str, AuthPayload] = {}
        self.failures: Dict[str, Exception] = {}
        self.redirect_uris: Dict[str, str] = {}

    @property
    def providers(self) -> Iterable[str]:
        return (GOOGLE, GITHUB)

    async def authorize_redirect(self, request, provider, redirect_uri):
        self.redirect_uris[provider] = redirect_uri
        return RedirectResponse(
            f"https://provider.example/{provider}/authorize", status_code=302
        )

    async def fetch_payload(self, request, provider):
        if provider in self.failures:
            raise self.failures[provider]
        return self.payloads[provider]


@pytest.fixture()
def provider_client():
    return FakeProviderClient()


@pytest.fixture()
def app(db_session, provider_client):
    from taskforge.app import create_app

    fastapi_app = create_app()

    def override_get_session():
        yield db_session

    fastapi_app.dependency_overrides[get_session] = override_get_session
    fastapi_app.dependency_overrides[get_provider_client] = lambda: provider_client
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app, follow_redirects=False) as c:
        yield c


def google_payload(
    *,
    email: Optional[str] = "test@example.com",
    name: Optional[str] = "Test User",
    uid: Optional[str] = "123456",
    email_verified=True,
) -> AuthPayload:
    return AuthPayload(
        provider=GOOGLE,
        uid=uid,
        info={"email": email, "name": name, "image": "https://example.com/avatar.jpg"},
        extra={"raw_info": {"email_verified": email_verified}},
    )


def github_payload(
    *,
    email: Optional[str] = "github@example.com",
    name: Optional[str] = "GitHub User",
    uid: Optional[str] = "654321",
) -> AuthPayload:
    return AuthPayload(
        provider=GITHUB,
        uid=uid,
        info={"email": email, "name": name, "image": "https://example.com/github-avatar.jpg"},
    )


@pytest.fixture()
def mock_google(provider_client):
    def _mock(**kwargs) -> AuthPayload:
        payload = google_payload(**kwargs)
        provider_client.payloads[GOOGLE] = payload
        return payload

    return _mock


@pytest.fixture()
def mock_github(provider_client):
    def _mock(**kwargs) -> AuthPayload:
        payload = github_payload(**kwargs)
        provider_client.payloads[GITHUB] = payload
        return payload

    return _mock


@pytest.fixture()
def mock_failure(provider_client):
    def _mock(provider: str, error_type: str = "invalid_credentials", exception=None) -> None:
        provider_client.failures[provider] = ProviderFailure(error_type, exception)

    return _mock
