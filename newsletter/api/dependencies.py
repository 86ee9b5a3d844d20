"""FastAPI dependencies exposing the objects built at startup."""

from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from newsletter.config import Settings
from newsletter.database import get_session
from newsletter.domain.services.subscription_service import SubscriptionService
from newsletter.email_client import EmailClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_client(request: Request) -> EmailClient:
    return request.app.state.email_client


def get_subscription_service(
    session: Annotated[Session, Depends(get_session)],
    email_client: Annotated[EmailClient, Depends(get_email_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SubscriptionService:
    return SubscriptionService(
        session,
        email_client=email_client,
        base_url=settings.application.base_url,
    )
