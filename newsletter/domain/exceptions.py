"""Domain-specific exception classes."""


class NewsletterError(Exception):
    """Base exception for newsletter errors."""

    pass


class ConfigError(NewsletterError):
    """Raised when the layered configuration cannot be resolved."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class SubscriberValidationError(NewsletterError, ValueError):
    """Raised when submitted subscriber data fails validation."""

    field = "subscriber data"

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"'{value}' is not a valid {self.field}: {reason}")


class InvalidSubscriberEmailError(SubscriberValidationError):
    """Raised when a string is not a valid subscriber email."""

    field = "subscriber email"


class InvalidSubscriberNameError(SubscriberValidationError):
    """Raised when a string is not a valid subscriber name."""

    field = "subscriber name"


class EmailDeliveryError(NewsletterError):
    """
    Raised when the email provider does not accept a send request.

    Transport failures and non-2xx responses share this one type.
    ``status_code`` is set when the provider answered, ``timed_out`` when
    the request hit the client timeout.
    """

    def __init__(
        self,
        recipient: str,
        detail: str,
        status_code: int | None = None,
        timed_out: bool = False,
    ):
        self.recipient = recipient
        self.detail = detail
        self.status_code = status_code
        self.timed_out = timed_out
        super().__init__(f"Failed to send email to {recipient}: {detail}")


class DuplicateSubscriberError(NewsletterError):
    """Raised when the email address is already subscribed."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Subscriber '{email}' already exists")


class SubscriptionTokenNotFoundError(NewsletterError):
    """Raised when a confirmation token does not match any subscriber."""

    def __init__(self, subscription_token: str):
        self.subscription_token = subscription_token
        super().__init__("Unknown subscription token")
