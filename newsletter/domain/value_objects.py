"""Domain value objects for validated subscriber input."""

from __future__ import annotations

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from newsletter.domain.exceptions import (
    InvalidSubscriberEmailError,
    InvalidSubscriberNameError,
)

MAX_NAME_LENGTH = 256

_FORBIDDEN_NAME_CHARACTERS: frozenset[str] = frozenset('/()"<>\\{}')


@dataclass(frozen=True)
class SubscriberEmail:
    """
    Immutable value object for a subscriber email address.

    The address is checked against the email grammar at construction time,
    so an instance always holds a syntactically valid address. Domain
    deliverability (DNS lookups) is not checked.
    """

    value: str

    def __post_init__(self) -> None:
        try:
            validate_email(self.value, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidSubscriberEmailError(self.value, reason=str(e)) from e

    @classmethod
    def parse(cls, raw: str) -> SubscriberEmail:
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberName:
    """
    Immutable value object for a subscriber display name.

    Rejects blank names, names longer than 256 characters and names
    containing characters commonly used for markup or injection.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value.strip():
            raise InvalidSubscriberNameError(self.value, reason="name cannot be empty")

        if len(self.value) > MAX_NAME_LENGTH:
            raise InvalidSubscriberNameError(
                self.value,
                reason=f"name cannot be longer than {MAX_NAME_LENGTH} characters",
            )

        forbidden = sorted(_FORBIDDEN_NAME_CHARACTERS.intersection(self.value))
        if forbidden:
            raise InvalidSubscriberNameError(
                self.value,
                reason=f"name contains forbidden characters: {' '.join(forbidden)}",
            )

    @classmethod
    def parse(cls, raw: str) -> SubscriberName:
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NewSubscriber:
    """A subscription request whose fields have all been validated."""

    email: SubscriberEmail
    name: SubscriberName

    @classmethod
    def from_form(cls, name: str, email: str) -> NewSubscriber:
        """
        Build a subscriber from raw form values.

        Raises:
            InvalidSubscriberNameError: If the name is rejected
            InvalidSubscriberEmailError: If the email is rejected
        """
        return cls(email=SubscriberEmail.parse(email), name=SubscriberName.parse(name))
