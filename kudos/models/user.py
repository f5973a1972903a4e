"""Database model for community members."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class User(SQLModel, table=True):
    """Member signed in through Discord, keyed by the Discord account id."""

    id: str = ORMField(primary_key=True)
    name: Optional[str] = ORMField(default=None, index=True)
    email: Optional[str] = None
    image: Optional[str] = None
    discord_id: Optional[str] = ORMField(default=None, index=True)
    # Not maintained; recognition points are always aggregated live.
    points: int = 0
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["User"]
