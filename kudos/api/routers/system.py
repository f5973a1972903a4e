"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...services.rate_limit import RATE_LIMITS, RateLimiter, get_rate_limit_status
from ..deps import CurrentUser, get_rate_limiter, require_user

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness check."""

    return {"ok": True}


@router.get("/me/rate-limits")
def my_rate_limits(
    user: CurrentUser = Depends(require_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> Dict[str, Any]:
    """Remaining budget per category for the signed-in member."""

    limits: Dict[str, Any] = {}
    for category, config in RATE_LIMITS.items():
        status = get_rate_limit_status(limiter, user.id, category)
        limits[category] = {
            "limit": config.max_requests,
            "remaining": status.remaining,
            "resetAt": status.reset_at,
        }
    return {"limits": limits}


__all__ = ["router"]
