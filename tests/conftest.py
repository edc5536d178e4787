from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from config import Settings, get_settings
from db import get_session
from errors import ExternalServiceError
from main import create_app
from providers.ticketmaster import get_events_provider
from schemas import ExternalEvent, UserCreate
from services.users import UserService

PASSWORD = "password123"


class FakeProvider:
    """Stands in for the ticketing API; records every call."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    def fetch_events(self, *, city: str, interests: List[str]) -> List[ExternalEvent]:
        self.calls.append({"city": city, "interests": interests})
        if self.error is not None:
            raise self.error
        return [ExternalEvent.model_validate(e) for e in self.events]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app_env="test",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        events_api_url="http://provider.test/events",
        events_api_token="test-token",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine, expire_on_commit=False) as s:
        yield s


@pytest.fixture
def user_service(session, settings) -> UserService:
    return UserService(session, settings)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def client(engine, settings, provider) -> TestClient:
    app = create_app()

    def _session() -> Iterator[Session]:
        with Session(engine, expire_on_commit=False) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_events_provider] = lambda: provider
    return TestClient(app)


def register(client: TestClient, email: str = "user@example.com", **extra: Any):
    body = {
        "name": "Test User",
        "email": email,
        "password": PASSWORD,
        "city": "Paris",
        "interests": ["sport"],
    }
    body.update(extra)
    return client.post("/auth/register", json=body)


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_token(client) -> str:
    resp = register(client)
    assert resp.status_code == 201
    return resp.json()["data"]["token"]


@pytest.fixture
def auth_headers(user_token) -> Dict[str, str]:
    return bearer(user_token)


@pytest.fixture
def admin_headers(client, user_service) -> Dict[str, str]:
    user_service.create_user(
        UserCreate(name="Admin", email="admin@example.com", password=PASSWORD, role="admin")
    )
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    return bearer(resp.json()["data"]["token"])


def provider_down() -> ExternalServiceError:
    return ExternalServiceError("Failed to fetch external events")
