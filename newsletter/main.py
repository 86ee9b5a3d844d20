"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from newsletter.api.router import router
from newsletter.config import Settings
from newsletter.email_client import EmailClient
from newsletter.middleware import RequestIdMiddleware


def create_app(
    settings: Settings,
    *,
    engine: Engine,
    email_client: EmailClient,
) -> FastAPI:
    """
    Build the FastAPI application around objects created once at startup.

    The settings, engine and email client are stored on ``app.state`` and
    handed to request handlers through the dependencies in
    ``newsletter.api.dependencies``.
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
        """Release the email client connection pool on shutdown."""
        yield
        await email_client.aclose()

    app = FastAPI(
        title="Newsletter API",
        description="Newsletter subscriptions with email confirmation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.email_client = email_client

    # Attach request ID middleware (must be added before routes)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(router)

    return app
