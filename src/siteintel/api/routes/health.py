"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/places", status_code=status.HTTP_200_OK)
def health_places() -> dict:
    """Report whether live intelligence can run, without calling the provider."""
    return {
        "service": "places",
        "configured": bool(settings.google_places_api_key),
        "strategy": settings.places_query_strategy,
    }
