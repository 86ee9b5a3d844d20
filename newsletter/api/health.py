"""Liveness endpoint."""

from fastapi import APIRouter, Response, status

router = APIRouter(tags=["health"])


@router.get("/health_check")
def health_check() -> Response:
    """Return 200 with an empty body while the process is serving requests."""
    return Response(status_code=status.HTTP_200_OK)
