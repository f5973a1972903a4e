"""Casting and withdrawing votes on nominations."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ..core.log import LOGGER
from ..core.time import utcnow
from ..models import Nomination, Vote
from .errors import Conflict, Forbidden, InvalidInput, NotFound, is_unique_violation
from .nominations import fetch_nomination


def _sanitize_nomination_id(nomination_id: Any) -> str:
    sanitized = nomination_id.strip() if isinstance(nomination_id, str) else ""
    if not sanitized:
        raise InvalidInput("Nomination id is required")
    return sanitized


def cast_vote(session: Session, *, nomination_id: Any, voter_id: str) -> Dict[str, Any]:
    """Vote on a nomination and return its refreshed view.

    Raises
    ------
    InvalidInput
        The nomination id is blank.
    NotFound
        No such nomination.
    Forbidden
        The voter wrote or received the nomination.
    Conflict
        The voter already voted on it. Concurrent duplicates are caught by
        the vote table's primary key, so exactly one insert wins.
    """

    nomination_id = _sanitize_nomination_id(nomination_id)

    nomination = session.get(Nomination, nomination_id)
    if nomination is None:
        raise NotFound("Nomination not found")

    if voter_id in (nomination.nominator_id, nomination.nominee_id):
        raise Forbidden("You cannot vote on your own nomination")

    try:
        session.execute(
            insert(Vote).values(
                nomination_id=nomination_id, voter_id=voter_id, created_at=utcnow()
            )
        )
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if not is_unique_violation(exc):
            raise
        raise Conflict("You have already voted for this nomination") from exc

    LOGGER.info(f"User {voter_id} voted on nomination {nomination_id}")
    return fetch_nomination(session, nomination_id, voter_id)


def remove_vote(
    session: Session, *, nomination_id: Any, voter_id: str
) -> Optional[Dict[str, Any]]:
    """Withdraw a vote. Withdrawing a vote that is not there is a no-op."""

    nomination_id = _sanitize_nomination_id(nomination_id)

    result = session.execute(
        delete(Vote).where(Vote.nomination_id == nomination_id, Vote.voter_id == voter_id)
    )
    session.commit()

    if result.rowcount:
        LOGGER.info(f"User {voter_id} removed vote on nomination {nomination_id}")
    else:
        LOGGER.debug(f"No vote by {voter_id} on nomination {nomination_id} to remove")
    return fetch_nomination(session, nomination_id, voter_id)


__all__ = ["cast_vote", "remove_vote"]
