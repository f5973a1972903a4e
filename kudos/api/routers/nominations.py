"""Nomination feed and submission endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ...core import get_session
from ...services.nominations import (
    create_nomination,
    fetch_nominations,
    fetch_nominations_paginated,
)
from ...services.rate_limit import RateLimiter, check_rate_limit
from ..deps import CurrentUser, get_current_user, get_rate_limiter, rate_limited

router = APIRouter(tags=["nominations"])


@router.get("/nominations")
def list_nominations(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    user: Optional[CurrentUser] = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    session: Session = Depends(get_session),
):
    """List nominations, paginated when ``page`` or ``pageSize`` is given."""

    viewer_id = user.id if user else None
    if viewer_id:
        check_rate_limit(limiter, viewer_id, "reads")

    if page or page_size:
        return fetch_nominations_paginated(
            session,
            viewer_id=viewer_id,
            page=page or None,
            page_size=page_size or None,
        )

    return {"nominations": fetch_nominations(session, viewer_id=viewer_id)}


@router.post("/nominations", status_code=201)
def submit_nomination(
    body: Dict[str, Any],
    user: CurrentUser = Depends(rate_limited("nominations")),
    session: Session = Depends(get_session),
):
    """Nominate another member, optionally with a reason."""

    nomination = create_nomination(
        session,
        nominator_id=user.id,
        nominee_id=body.get("nomineeId"),
        reason=body.get("reason"),
    )
    return {"nomination": nomination}


__all__ = ["router"]
