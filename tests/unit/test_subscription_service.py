"""Unit tests for the subscription service."""

import threading

import pytest

from newsletter.domain.models import Subscription, SubscriptionToken
from newsletter.domain.services.subscription_service import SubscriptionService
from newsletter.domain.value_objects import NewSubscriber

pytestmark = pytest.mark.anyio


class RecordingRepository:
    """Stand-in repository remembering which thread stored the subscriber."""

    def __init__(self) -> None:
        self.thread_id: int | None = None

    def create_pending(self, new_subscriber: NewSubscriber):
        self.thread_id = threading.get_ident()
        subscription = Subscription.create(new_subscriber)
        return subscription, SubscriptionToken.generate(subscription.id)


def make_subscriber() -> NewSubscriber:
    return NewSubscriber.from_form(name="le guin", email="ursula_le_guin@gmail.com")


async def test_subscribe_stores_the_subscriber_off_the_event_loop(email_client):
    service = SubscriptionService(None, email_client, "http://127.0.0.1:8000")
    repository = RecordingRepository()
    service.repository = repository

    await service.subscribe(make_subscriber())

    assert repository.thread_id is not None
    assert repository.thread_id != threading.get_ident()


async def test_subscribe_sends_the_confirmation_link(email_client, email_server):
    service = SubscriptionService(None, email_client, "http://127.0.0.1:8000/")
    service.repository = RecordingRepository()

    await service.subscribe(make_subscriber())

    assert len(email_server.requests) == 1
    body = email_server.bodies[0]
    assert "http://127.0.0.1:8000/subscriptions/confirm?subscription_token=" in body["TextBody"]
