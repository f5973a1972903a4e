"""Database models for nominations and the votes cast on them."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

REASON_MAX_LENGTH = 500


def _new_id() -> str:
    return uuid.uuid4().hex


class Nomination(SQLModel, table=True):
    """One member proposing another for recognition."""

    __table_args__ = (
        UniqueConstraint("nominator_id", "nominee_id", name="uq_nomination_nominator_nominee"),
    )

    id: str = ORMField(default_factory=_new_id, primary_key=True)
    nominee_id: str = ORMField(foreign_key="user.id", index=True)
    nominator_id: str = ORMField(foreign_key="user.id", index=True)
    reason: Optional[str] = ORMField(default=None, max_length=REASON_MAX_LENGTH)
    created_at: datetime = ORMField(default_factory=utcnow, index=True)


class Vote(SQLModel, table=True):
    """A member's endorsement of a nomination; the key allows one per voter."""

    nomination_id: str = ORMField(foreign_key="nomination.id", primary_key=True)
    voter_id: str = ORMField(foreign_key="user.id", primary_key=True, index=True)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Nomination", "REASON_MAX_LENGTH", "Vote"]
