"""Business logic layer for subscription operations."""

import logging

from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from newsletter.domain.models import Subscription
from newsletter.domain.value_objects import NewSubscriber, SubscriberEmail
from newsletter.email_client import EmailClient
from newsletter.repositories.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Welcome!"


class SubscriptionService:
    """Service layer for subscription business logic."""

    def __init__(self, session: Session, email_client: EmailClient, base_url: str):
        self.repository = SubscriptionRepository(session)
        self.email_client = email_client
        self.base_url = base_url.rstrip("/")

    async def subscribe(self, new_subscriber: NewSubscriber) -> Subscription:
        """
        Store a pending subscriber and send the confirmation email.

        Raises:
            DuplicateSubscriberError: If the email is already subscribed
            EmailDeliveryError: If the confirmation email is not accepted
        """
        # Blocking database I/O stays off the event loop
        subscription, token = await run_in_threadpool(
            self.repository.create_pending, new_subscriber
        )
        logger.info(
            "New subscriber saved",
            extra={"subscriber_id": str(subscription.id)},
        )

        await self.send_confirmation_email(
            new_subscriber.email,
            token.subscription_token,
        )
        return subscription

    async def send_confirmation_email(
        self,
        recipient: SubscriberEmail,
        subscription_token: str,
    ) -> None:
        link = self.confirmation_link(subscription_token)
        await self.email_client.send_email(
            recipient,
            CONFIRMATION_SUBJECT,
            "Welcome to our newsletter!<br />"
            f'Click <a href="{link}">here</a> to confirm your subscription.',
            f"Welcome to our newsletter!\nVisit {link} to confirm your subscription.",
        )

    def confirmation_link(self, subscription_token: str) -> str:
        return f"{self.base_url}/subscriptions/confirm?subscription_token={subscription_token}"

    def confirm(self, subscription_token: str) -> Subscription:
        """
        Confirm the subscriber a token was issued for.

        Raises:
            SubscriptionTokenNotFoundError: If the token is unknown
        """
        subscription = self.repository.get_subscriber_by_token(subscription_token)
        if subscription.is_confirmed:
            return subscription

        subscription = self.repository.confirm(subscription)
        logger.info(
            "Subscriber confirmed",
            extra={"subscriber_id": str(subscription.id)},
        )
        return subscription
