"""Pytest fixtures for testing."""

import json
import os
import uuid
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from newsletter.config import ENV_PREFIX, Settings, resolve_configuration
from newsletter.database import get_session
from newsletter.email_client import EmailClient
from newsletter.logging_config import configure_logging
from newsletter.main import create_app

CONFIGURATION_DIRECTORY = Path(__file__).resolve().parents[1] / "configuration"

# Log output is noisy; opt in with TEST_LOG=1
if os.getenv("TEST_LOG"):
    configure_logging("test", log_level="DEBUG")


class EmailServer:
    """
    In-process stand-in for the email provider.

    Records every request and answers with ``status_code``.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop APP_* variables inherited from the shell running the tests."""
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key)


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio."""
    return "asyncio"


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Repository settings with an isolated database name and a random port."""
    settings = resolve_configuration(CONFIGURATION_DIRECTORY)
    return settings.model_copy(
        update={
            "database": settings.database.model_copy(
                update={"database_name": str(uuid.uuid4())}
            ),
            "application": settings.application.model_copy(update={"port": 0}),
        }
    )


@pytest.fixture(name="email_server")
def email_server_fixture() -> EmailServer:
    return EmailServer()


@pytest.fixture(name="email_client")
def email_client_fixture(settings: Settings, email_server: EmailServer) -> EmailClient:
    """EmailClient wired to the in-process provider double."""
    return EmailClient(
        settings.email_client.base_url,
        settings.email_client.sender(),
        settings.email_client.authorization_token.get_secret_value(),
        transport=email_server.transport(),
    )


@pytest.fixture(name="engine")
def engine_fixture():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(
    settings: Settings,
    engine,
    session: Session,
    email_client: EmailClient,
):
    """Create test client with overridden database session."""

    def get_session_override():
        return session

    app = create_app(settings, engine=engine, email_client=email_client)
    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
