"""Main router aggregator."""

from fastapi import APIRouter

from newsletter.api.health import router as health_router
from newsletter.api.subscriptions import router as subscriptions_router

router = APIRouter()

router.include_router(health_router)
router.include_router(subscriptions_router)
