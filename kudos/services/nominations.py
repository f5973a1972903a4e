"""Nomination reads enriched with people, vote counts and viewer flags."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from sqlmodel import Session, func, select

from ..core.log import LOGGER
from ..core.time import isoformat_utc
from ..models import REASON_MAX_LENGTH, Nomination, User, Vote
from .errors import Conflict, InvalidInput, NotFound, is_unique_violation
from .pagination import page_meta, sanitize_int

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_Nominator = aliased(User, name="nominator")
_Nominee = aliased(User, name="nominee")


def _default_order() -> List[Any]:
    return [Nomination.created_at.desc(), Nomination.id.desc()]


# Filters ---------------------------------------------------------------------


def received_by(user_id: str):
    """Nominations naming ``user_id`` as nominee."""

    return Nomination.nominee_id == user_id


def submitted_by(user_id: str):
    """Nominations written by ``user_id``."""

    return Nomination.nominator_id == user_id


def voted_by(user_id: str):
    """Nominations ``user_id`` has voted on."""

    return Nomination.id.in_(select(Vote.nomination_id).where(Vote.voter_id == user_id))


# Reads -----------------------------------------------------------------------


def _voted_nomination_ids(session: Session, viewer_id: Optional[str]) -> Set[str]:
    if not viewer_id:
        return set()
    return set(session.exec(select(Vote.nomination_id).where(Vote.voter_id == viewer_id)).all())


def nomination_to_dict(
    nomination: Nomination,
    nominator: User,
    nominee: User,
    vote_count: int,
    voted_ids: Set[str],
) -> Dict[str, Any]:
    """Serialise a nomination row and its relations to the API shape."""

    return {
        "id": nomination.id,
        "reason": nomination.reason,
        "createdAt": isoformat_utc(nomination.created_at),
        "nominator": {
            "id": nominator.id,
            "name": nominator.name,
            "image": nominator.image,
        },
        "nominee": {
            "id": nominee.id,
            "name": nominee.name,
            "image": nominee.image,
            "points": nominee.points,
        },
        "voteCount": int(vote_count or 0),
        "hasVoted": nomination.id in voted_ids,
    }


def fetch_nominations(
    session: Session,
    *,
    where: Iterable[Any] = (),
    order_by: Optional[Sequence[Any]] = None,
    viewer_id: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Return enriched nominations, newest first unless ``order_by`` says otherwise.

    Vote counts come from a grouped subquery in the same statement, and the
    viewer's votes are loaded once for the whole batch.
    """

    vote_counts = (
        select(Vote.nomination_id, func.count().label("vote_count"))
        .group_by(Vote.nomination_id)
        .subquery("vote_counts")
    )
    statement = (
        select(
            Nomination,
            _Nominator,
            _Nominee,
            func.coalesce(vote_counts.c.vote_count, 0).label("vote_count"),
        )
        .select_from(Nomination)
        .join(_Nominator, _Nominator.id == Nomination.nominator_id)
        .join(_Nominee, _Nominee.id == Nomination.nominee_id)
        .outerjoin(vote_counts, vote_counts.c.nomination_id == Nomination.id)
    )

    criteria = list(where)
    if criteria:
        statement = statement.where(*criteria)
    statement = statement.order_by(*(order_by or _default_order()))
    if limit is not None:
        statement = statement.limit(limit)
    if offset is not None:
        statement = statement.offset(offset)

    rows = session.exec(statement).all()
    voted_ids = _voted_nomination_ids(session, viewer_id)

    return [
        nomination_to_dict(nomination, nominator, nominee, vote_count, voted_ids)
        for nomination, nominator, nominee, vote_count in rows
    ]


def fetch_nomination(
    session: Session, nomination_id: str, viewer_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Return one enriched nomination or ``None`` when it does not exist."""

    results = fetch_nominations(
        session, where=[Nomination.id == nomination_id], viewer_id=viewer_id, limit=1
    )
    return results[0] if results else None


def count_nominations(session: Session, where: Iterable[Any] = ()) -> int:
    statement = select(func.count(Nomination.id))
    criteria = list(where)
    if criteria:
        statement = statement.where(*criteria)
    return int(session.exec(statement).one())


def fetch_nominations_paginated(
    session: Session,
    *,
    where: Iterable[Any] = (),
    order_by: Optional[Sequence[Any]] = None,
    viewer_id: Optional[str] = None,
    page: Any = 1,
    page_size: Any = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """One page of enriched nominations plus page metadata."""

    criteria = list(where)
    sanitized_page = sanitize_int(page, 1)
    sanitized_page_size = sanitize_int(page_size, DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)

    nominations = fetch_nominations(
        session,
        where=criteria,
        order_by=order_by,
        viewer_id=viewer_id,
        limit=sanitized_page_size,
        offset=(sanitized_page - 1) * sanitized_page_size,
    )
    total_count = count_nominations(session, criteria)

    return {
        "nominations": nominations,
        **page_meta(sanitized_page, sanitized_page_size, total_count),
    }


# Writes ----------------------------------------------------------------------


def _normalize_reason(reason: Any) -> Optional[str]:
    if reason is None:
        return None
    if not isinstance(reason, str):
        raise InvalidInput("Reason must be text")
    reason = reason.strip()
    if len(reason) > REASON_MAX_LENGTH:
        raise InvalidInput(f"Reason is too long (max {REASON_MAX_LENGTH} characters)")
    return reason or None


def create_nomination(
    session: Session,
    *,
    nominator_id: str,
    nominee_id: Any,
    reason: Any = None,
) -> Dict[str, Any]:
    """Record a nomination and return it as the nominator sees it."""

    nominee_id = nominee_id.strip() if isinstance(nominee_id, str) else ""
    if not nominee_id:
        raise InvalidInput("Nominee is required")
    reason = _normalize_reason(reason)

    if nominee_id == nominator_id:
        raise InvalidInput("You cannot nominate yourself")

    if session.get(User, nominee_id) is None:
        raise NotFound("Nominee not found")

    nomination = Nomination(nominee_id=nominee_id, nominator_id=nominator_id, reason=reason)
    session.add(nomination)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if not is_unique_violation(exc):
            raise
        raise Conflict("You have already nominated this person") from exc

    LOGGER.info(f"User {nominator_id} nominated {nominee_id} ({nomination.id})")
    return fetch_nomination(session, nomination.id, nominator_id)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "count_nominations",
    "create_nomination",
    "fetch_nomination",
    "fetch_nominations",
    "fetch_nominations_paginated",
    "nomination_to_dict",
    "received_by",
    "submitted_by",
    "voted_by",
]
