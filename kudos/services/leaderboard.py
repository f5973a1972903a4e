"""Recognition leaderboard.

A member's recognition points are the nominations they received plus every
vote cast on those nominations. Only members with at least one nomination
are ranked.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlmodel import Session, func, select

from ..models import Nomination, User, Vote
from .pagination import sanitize_int, total_pages

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def _ranking_statement():
    vote_counts = (
        select(Vote.nomination_id, func.count().label("vote_count"))
        .group_by(Vote.nomination_id)
        .subquery("vote_counts")
    )
    nominee_totals = (
        select(
            Nomination.nominee_id.label("nominee_id"),
            func.count(Nomination.id).label("nomination_count"),
            func.coalesce(func.sum(vote_counts.c.vote_count), 0).label("vote_count"),
        )
        .select_from(Nomination)
        .outerjoin(vote_counts, vote_counts.c.nomination_id == Nomination.id)
        .group_by(Nomination.nominee_id)
        .subquery("nominee_totals")
    )
    points = (nominee_totals.c.nomination_count + nominee_totals.c.vote_count).label(
        "recognition_points"
    )
    return (
        select(
            User.id,
            User.name,
            User.image,
            nominee_totals.c.nomination_count,
            nominee_totals.c.vote_count,
            points,
        )
        .select_from(nominee_totals)
        .join(User, User.id == nominee_totals.c.nominee_id)
        .order_by(
            points.desc(),
            nominee_totals.c.vote_count.desc(),
            User.name.asc().nulls_last(),
        )
    )


def count_nominees(session: Session) -> int:
    return int(session.exec(select(func.count(func.distinct(Nomination.nominee_id)))).one())


def fetch_leaderboard(
    session: Session, page: Any = None, page_size: Any = None
) -> Dict[str, Any]:
    """Return one page of ranked nominees.

    ``rank`` is positional: ``(page - 1) * page_size + index + 1``.
    """

    sanitized_page = sanitize_int(page, 1)
    sanitized_page_size = sanitize_int(page_size, DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)
    offset = (sanitized_page - 1) * sanitized_page_size

    rows = session.exec(
        _ranking_statement().limit(sanitized_page_size).offset(offset)
    ).all()

    entries: List[Dict[str, Any]] = []
    for index, row in enumerate(rows):
        user_id, name, image, nomination_count, vote_count, recognition_points = row
        entries.append(
            {
                "rank": offset + index + 1,
                "userId": user_id,
                "name": name,
                "image": image,
                "nominationCount": int(nomination_count),
                "voteCount": int(vote_count),
                "recognitionPoints": int(recognition_points),
            }
        )

    total_nominees = count_nominees(session)
    return {
        "entries": entries,
        "page": sanitized_page,
        "pageSize": sanitized_page_size,
        "totalNominees": total_nominees,
        "totalPages": total_pages(total_nominees, sanitized_page_size),
    }


def fetch_user_standing(session: Session, user_id: str) -> Optional[Dict[str, Any]]:
    """Recognition totals for one member, or ``None`` if never nominated."""

    nomination_count = int(
        session.exec(
            select(func.count(Nomination.id)).where(Nomination.nominee_id == user_id)
        ).one()
    )
    if not nomination_count:
        return None
    vote_count = int(
        session.exec(
            select(func.count())
            .select_from(Vote)
            .join(Nomination, Nomination.id == Vote.nomination_id)
            .where(Nomination.nominee_id == user_id)
        ).one()
    )
    return {
        "nominationCount": nomination_count,
        "voteCount": vote_count,
        "recognitionPoints": nomination_count + vote_count,
    }


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "count_nominees",
    "fetch_leaderboard",
    "fetch_user_standing",
]
