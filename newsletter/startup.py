"""Application assembly and process entry point."""

from __future__ import annotations

import logging
import socket
import sys

import uvicorn
from fastapi import FastAPI
from sqlalchemy.engine import Engine

from newsletter.config import Settings, resolve_configuration
from newsletter.database import get_engine
from newsletter.domain.exceptions import ConfigError, InvalidSubscriberEmailError
from newsletter.email_client import EmailClient
from newsletter.logging_config import APP_NAME, configure_logging
from newsletter.main import create_app

logger = logging.getLogger(__name__)


class Application:
    """
    A built application bound to its listening socket.

    Binding happens in ``build`` so that port 0 resolves to a concrete port
    before the server starts, which lets tests run many instances side by
    side.
    """

    def __init__(self, app: FastAPI, listener: socket.socket):
        self.app = app
        self._listener = listener

    @classmethod
    def build(cls, settings: Settings, engine: Engine | None = None) -> Application:
        """
        Assemble the application from resolved settings.

        Raises:
            ConfigError: If the email client settings are unusable
            OSError: If the address cannot be bound
        """
        email_settings = settings.email_client
        try:
            email_client = EmailClient(
                email_settings.base_url,
                email_settings.sender(),
                email_settings.authorization_token.get_secret_value(),
            )
        except InvalidSubscriberEmailError as e:
            raise ConfigError(
                f"Invalid sender email address: {e}",
                source="email_client.sender_email",
            ) from e
        except ValueError as e:
            raise ConfigError(str(e), source="email_client.base_url") from e

        app = create_app(
            settings,
            engine=engine if engine is not None else get_engine(settings.database),
            email_client=email_client,
        )
        listener = socket.create_server(
            (settings.application.host, settings.application.port)
        )
        return cls(app, listener)

    @property
    def port(self) -> int:
        return self._listener.getsockname()[1]

    def run_until_stopped(self) -> None:
        """Serve requests until the process is interrupted."""
        config = uvicorn.Config(self.app, log_config=None)
        server = uvicorn.Server(config)
        logger.info("Listening", extra={"port": self.port})
        try:
            server.run(sockets=[self._listener])
        finally:
            self.app.state.engine.dispose()

    def close(self) -> None:
        self._listener.close()


def main() -> None:
    configure_logging(APP_NAME)

    try:
        settings = resolve_configuration()
        configure_logging(APP_NAME, settings.application.log_level)
        application = Application.build(settings)
    except ConfigError as e:
        logger.error(
            "Failed to load configuration: %s", e, extra={"config_source": e.source}
        )
        sys.exit(1)

    application.run_until_stopped()


if __name__ == "__main__":
    main()
