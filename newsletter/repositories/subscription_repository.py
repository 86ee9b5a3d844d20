"""Data access layer for subscription operations."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from newsletter.domain.exceptions import (
    DuplicateSubscriberError,
    SubscriptionTokenNotFoundError,
)
from newsletter.domain.models import Subscription, SubscriptionToken
from newsletter.domain.value_objects import NewSubscriber


class SubscriptionRepository:
    """Repository for subscription database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create_pending(
        self, new_subscriber: NewSubscriber
    ) -> tuple[Subscription, SubscriptionToken]:
        """
        Store a pending subscription together with its confirmation token.

        Both rows are written in a single transaction.

        Args:
            new_subscriber: Validated subscriber input

        Returns:
            The created subscription and its token

        Raises:
            DuplicateSubscriberError: If the email is already subscribed
        """
        subscription = Subscription.create(new_subscriber)
        token = SubscriptionToken.generate(subscriber_id=subscription.id)

        try:
            self.session.add(subscription)
            self.session.add(token)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateSubscriberError(email=subscription.email) from e
        except SQLAlchemyError:
            self.session.rollback()
            raise

        self.session.refresh(subscription)
        self.session.refresh(token)
        return subscription, token

    def get_subscriber_by_token(self, subscription_token: str) -> Subscription:
        """
        Look up the subscriber a confirmation token was issued for.

        Raises:
            SubscriptionTokenNotFoundError: If no such token exists
        """
        statement = select(SubscriptionToken).where(
            SubscriptionToken.subscription_token == subscription_token
        )
        token = self.session.exec(statement).first()
        if not token or not token.subscriber:
            raise SubscriptionTokenNotFoundError(subscription_token=subscription_token)

        return token.subscriber

    def confirm(self, subscription: Subscription) -> Subscription:
        """Mark a subscription as confirmed."""
        subscription.confirm()
        self.session.add(subscription)
        self.session.commit()
        self.session.refresh(subscription)
        return subscription
