"""Concurrency tests for duplicate subscriptions.

NOTE: These tests require a running PostgreSQL database and are skipped
unless TEST_DATABASE_URL is set.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine, select

from newsletter.domain.models import Subscription
from newsletter.main import create_app

POSTGRES_TEST_URL = os.getenv("TEST_DATABASE_URL")
pytestmark = pytest.mark.skipif(
    not POSTGRES_TEST_URL,
    reason="Concurrency tests require TEST_DATABASE_URL (PostgreSQL)",
)


@pytest.fixture(name="pg_engine")
def pg_engine_fixture():
    engine = create_engine(POSTGRES_TEST_URL)
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="pg_client")
def pg_client_fixture(settings, pg_engine, email_client):
    """Test client where every request opens its own session."""
    app = create_app(settings, engine=pg_engine, email_client=email_client)
    with TestClient(app) as client:
        yield client


def test_concurrent_duplicate_subscriptions_store_one_subscriber(pg_client, pg_engine):
    """
    Ten simultaneous submissions of the same email.

    Expected: exactly one 200, every other request 409, one stored row.
    """
    body = urlencode({"name": "le guin", "email": "ursula_le_guin@gmail.com"})

    def subscribe(_):
        return pg_client.post(
            "/subscriptions",
            content=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        ).status_code

    with ThreadPoolExecutor(max_workers=10) as pool:
        statuses = list(pool.map(subscribe, range(10)))

    assert statuses.count(200) == 1
    assert statuses.count(409) == 9

    with Session(pg_engine) as session:
        assert len(session.exec(select(Subscription)).all()) == 1
