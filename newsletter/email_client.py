"""HTTP client for the transactional email provider."""

from __future__ import annotations

import logging

import anyio
import httpx

from newsletter.domain.exceptions import EmailDeliveryError
from newsletter.domain.value_objects import SubscriberEmail
from newsletter.schemas.email import SendEmailRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
AUTHORIZATION_HEADER = "X-Postmark-Server-Token"
SEND_EMAIL_PATH = "/email"


class EmailClient:
    """
    Sends emails through the provider's HTTP API.

    One ``httpx.AsyncClient`` is built at construction and reused for every
    send, so a single instance should live as long as the application. The
    instance holds no per-call state and may be shared by concurrent tasks.
    """

    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        authorization_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Absolute http(s) URL of the provider
            sender: Address every email is sent from
            authorization_token: Provider server token
            timeout: Ceiling for the whole request/response cycle in seconds
            transport: Replacement transport, used by test doubles

        Raises:
            ValueError: If ``base_url`` is not an absolute http(s) URL
        """
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid email provider base URL: '{base_url}'") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Invalid email provider base URL: '{base_url}'")

        self._base_url = base_url
        self._sender = sender
        self._authorization_token = authorization_token
        self._timeout = timeout
        self._endpoint = url.join(SEND_EMAIL_PATH)
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def sender(self) -> SubscriberEmail:
        return self._sender

    async def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_content: str,
        text_content: str,
    ) -> None:
        """
        Send a single email. No retry is attempted.

        Raises:
            EmailDeliveryError: On any transport failure, timeout or
                non-2xx response
        """
        request_body = SendEmailRequest(
            sender=str(self._sender),
            recipient=str(recipient),
            subject=subject,
            html_body=html_content,
            text_body=text_content,
        )

        try:
            # httpx limits each phase separately; the ceiling covers the whole exchange
            with anyio.fail_after(self._timeout):
                response = await self._http_client.post(
                    self._endpoint,
                    headers={AUTHORIZATION_HEADER: self._authorization_token},
                    json=request_body.to_wire(),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = EmailDeliveryError(
                recipient=str(recipient),
                detail=f"provider responded with {e.response.status_code}",
                status_code=e.response.status_code,
            )
            logger.error(str(error), extra={"status_code": error.status_code})
            raise error from e
        except (TimeoutError, httpx.TimeoutException) as e:
            error = EmailDeliveryError(
                recipient=str(recipient),
                detail=f"request timed out ({type(e).__name__})",
                timed_out=True,
            )
            logger.error(str(error))
            raise error from e
        except httpx.HTTPError as e:
            error = EmailDeliveryError(
                recipient=str(recipient),
                detail=f"{type(e).__name__}: {e}",
            )
            logger.error(str(error))
            raise error from e

        logger.info(
            "Email sent",
            extra={"recipient": str(recipient), "status_code": response.status_code},
        )

    async def aclose(self) -> None:
        """Release the pooled connections."""
        await self._http_client.aclose()
