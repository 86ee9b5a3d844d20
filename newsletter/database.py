"""Database connection and session management."""

from typing import Generator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from newsletter.config import DatabaseSettings

CONNECT_TIMEOUT_SECONDS = 2


def get_engine(settings: DatabaseSettings, echo: bool = False) -> Engine:
    """Create the connection pool. No connection is opened until first use."""
    return create_engine(
        settings.connection_url(),
        echo=echo,
        pool_pre_ping=True,  # Verify connections before use
        connect_args={"connect_timeout": CONNECT_TIMEOUT_SECONDS},
    )


def get_session(request: Request) -> Generator[Session, None, None]:
    """Dependency to provide database session to endpoints."""
    with Session(request.app.state.engine) as session:
        yield session
