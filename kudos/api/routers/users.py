"""Member profile endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from ...core import get_session, isoformat_utc
from ...models import User
from ...services.leaderboard import fetch_user_standing
from ...services.nominations import fetch_nominations, received_by, submitted_by, voted_by
from ..deps import CurrentUser, get_current_user

router = APIRouter(tags=["users"])


@router.get("/users/{user_id}/profile")
def get_user_profile(
    user_id: str,
    viewer: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """A member with the nominations they received, wrote and voted on."""

    user = session.get(User, user_id.strip())
    if not user:
        raise HTTPException(404, "User not found")

    viewer_id = viewer.id if viewer else None
    standing = fetch_user_standing(session, user.id) or {
        "nominationCount": 0,
        "voteCount": 0,
        "recognitionPoints": 0,
    }

    return {
        "user": {
            "id": user.id,
            "name": user.name,
            "image": user.image,
            "points": user.points,
            "created_at": isoformat_utc(user.created_at),
            **standing,
        },
        "received": fetch_nominations(session, where=[received_by(user.id)], viewer_id=viewer_id),
        "submitted": fetch_nominations(session, where=[submitted_by(user.id)], viewer_id=viewer_id),
        "voted": fetch_nominations(session, where=[voted_by(user.id)], viewer_id=viewer_id),
    }


__all__ = ["router"]
