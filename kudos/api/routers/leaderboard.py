"""Leaderboard endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ...core import get_session
from ...services.leaderboard import fetch_leaderboard

router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard")
def get_leaderboard(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    session: Session = Depends(get_session),
):
    """Ranked nominees by recognition points."""

    return fetch_leaderboard(session, page=page or None, page_size=page_size or None)


__all__ = ["router"]
