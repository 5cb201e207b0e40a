"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/oracle", status_code=status.HTTP_200_OK)
async def health_oracle() -> dict:
    """Check whether the suggestion oracle is configured and reachable."""
    if not settings.oracle_enabled:
        return {"service": "oracle", "configured": False, "healthy": False}
    from ...services.oracle import SuggestionOracle

    try:
        healthy = await SuggestionOracle().check_health()
        return {"service": "oracle", "configured": True, "healthy": healthy}
    except Exception as e:
        return {"service": "oracle", "configured": True, "healthy": False, "error": str(e)}
