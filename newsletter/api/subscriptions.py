"""API endpoints for subscription operations."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError

from newsletter.api.dependencies import get_subscription_service
from newsletter.domain.exceptions import (
    DuplicateSubscriberError,
    EmailDeliveryError,
    SubscriberValidationError,
    SubscriptionTokenNotFoundError,
)
from newsletter.domain.services.subscription_service import SubscriptionService
from newsletter.domain.value_objects import NewSubscriber

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", status_code=status.HTTP_200_OK)
async def subscribe(
    service: Annotated[SubscriptionService, Depends(get_subscription_service)],
    name: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
) -> Response:
    """Register a subscriber and send the confirmation email."""
    if name is None or email is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both name and email are required",
        )

    try:
        new_subscriber = NewSubscriber.from_form(name=name, email=email)
    except SubscriberValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    try:
        await service.subscribe(new_subscriber)
    except DuplicateSubscriberError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except SQLAlchemyError:
        logger.exception("Failed to store subscriber")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store subscriber",
        )
    except EmailDeliveryError as e:
        logger.error(
            "Failed to send confirmation email",
            extra={"status_code": e.status_code, "timed_out": e.timed_out},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send confirmation email",
        )

    return Response(status_code=status.HTTP_200_OK)


@router.get("/confirm", status_code=status.HTTP_200_OK)
def confirm(
    service: Annotated[SubscriptionService, Depends(get_subscription_service)],
    subscription_token: Annotated[str | None, Query()] = None,
) -> Response:
    """Confirm a pending subscriber using the token from the email link."""
    if not subscription_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing subscription token",
        )

    try:
        service.confirm(subscription_token)
    except SubscriptionTokenNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    return Response(status_code=status.HTTP_200_OK)
