"""SQLModel database models for subscriptions and confirmation tokens."""

import secrets
import string
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, Relationship, SQLModel

from newsletter.domain.value_objects import NewSubscriber

SUBSCRIPTION_TOKEN_LENGTH = 25

_TOKEN_ALPHABET = string.ascii_letters + string.digits


class SubscriptionStatus(str, Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


class Subscription(SQLModel, table=True):
    """
    Represents a newsletter subscriber.

    Business Rules:
    - email is unique across all subscribers
    - status starts as pending_confirmation and becomes confirmed once the
      subscriber follows the link in the confirmation email
    """

    __tablename__ = "subscriptions"

    # Primary Key
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Subscriber Details
    email: str = Field(
        unique=True,
        index=True,
        description="Validated subscriber email address",
    )
    name: str = Field(
        max_length=256,
        description="Validated subscriber display name",
    )

    # Lifecycle
    status: str = Field(
        default=SubscriptionStatus.PENDING_CONFIRMATION.value,
        max_length=32,
        description="pending_confirmation or confirmed",
    )
    subscribed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp of the subscription request",
    )

    # Relationships
    tokens: list["SubscriptionToken"] = Relationship(
        back_populates="subscriber",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def is_confirmed(self) -> bool:
        return self.status == SubscriptionStatus.CONFIRMED.value

    @classmethod
    def create(cls, new_subscriber: NewSubscriber) -> "Subscription":
        """Create a pending subscription from validated input."""
        return cls(
            email=str(new_subscriber.email),
            name=str(new_subscriber.name),
        )

    def confirm(self) -> None:
        self.status = SubscriptionStatus.CONFIRMED.value


class SubscriptionToken(SQLModel, table=True):
    """Confirmation token sent to a subscriber by email."""

    __tablename__ = "subscription_tokens"

    subscription_token: str = Field(
        primary_key=True,
        max_length=SUBSCRIPTION_TOKEN_LENGTH,
    )
    subscriber_id: uuid.UUID = Field(
        foreign_key="subscriptions.id",
        index=True,
        description="Reference to the subscriber being confirmed",
    )

    subscriber: Optional[Subscription] = Relationship(back_populates="tokens")

    @classmethod
    def generate(cls, subscriber_id: uuid.UUID) -> "SubscriptionToken":
        """Create a token of random case-sensitive alphanumeric characters."""
        token = "".join(
            secrets.choice(_TOKEN_ALPHABET) for _ in range(SUBSCRIPTION_TOKEN_LENGTH)
        )
        return cls(subscription_token=token, subscriber_id=subscriber_id)
