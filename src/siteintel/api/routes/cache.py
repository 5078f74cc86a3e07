"""Cache management endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from ...services import analysis

router = APIRouter(prefix="/cache", tags=["cache"])

logger = logging.getLogger(__name__)


@router.get("/stats", status_code=status.HTTP_200_OK)
def cache_stats() -> dict:
    return analysis.get_places_cache().stats()


@router.delete("", status_code=status.HTTP_200_OK)
def clear_cache() -> dict:
    """Drop every memory entry and every durable ward snapshot."""
    cleared = analysis.clear_caches()
    logger.info(f"Cache cleared: {cleared}")
    return cleared
