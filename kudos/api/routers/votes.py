"""Voting endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ...core import get_session
from ...services.votes import cast_vote, remove_vote
from ..deps import CurrentUser, rate_limited

router = APIRouter(tags=["votes"])


def _nomination_id_from(body: Dict[str, Any]) -> str:
    value = body.get("nominationId")
    return value if isinstance(value, str) else ""


@router.post("/votes", status_code=201)
def create_vote(
    body: Dict[str, Any],
    user: CurrentUser = Depends(rate_limited("votes")),
    session: Session = Depends(get_session),
):
    """Vote on the nomination named in the body."""

    nomination = cast_vote(session, nomination_id=_nomination_id_from(body), voter_id=user.id)
    return {"nomination": nomination}


@router.delete("/votes")
def delete_vote(
    body: Dict[str, Any],
    user: CurrentUser = Depends(rate_limited("votes")),
    session: Session = Depends(get_session),
):
    """Withdraw a vote; succeeds even if there was nothing to withdraw."""

    nomination = remove_vote(session, nomination_id=_nomination_id_from(body), voter_id=user.id)
    return {"nomination": nomination}


@router.post("/nominations/{nomination_id}/vote")
def vote_on_nomination(
    nomination_id: str,
    user: CurrentUser = Depends(rate_limited("votes")),
    session: Session = Depends(get_session),
):
    return {"nomination": cast_vote(session, nomination_id=nomination_id, voter_id=user.id)}


@router.delete("/nominations/{nomination_id}/vote")
def unvote_nomination(
    nomination_id: str,
    user: CurrentUser = Depends(rate_limited("votes")),
    session: Session = Depends(get_session),
):
    return {"nomination": remove_vote(session, nomination_id=nomination_id, voter_id=user.id)}


__all__ = ["router"]
