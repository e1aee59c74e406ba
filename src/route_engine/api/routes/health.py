"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_directions_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health
    return check_health


@router.get("/health/directions", status_code=status.HTTP_200_OK)
def health_directions() -> dict:
    """Check the directions provider. Optimization never depends on it."""
    if not settings.osrm_base_url:
        return {"status": "not_configured", "base_url": None}
    healthy = _get_directions_health_check()()
    return {
        "status": "ok" if healthy else "unavailable",
        "base_url": settings.osrm_base_url,
        "profile": settings.osrm_profile,
    }
