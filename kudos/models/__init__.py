"""Database model exports."""

from .nomination import REASON_MAX_LENGTH, Nomination, Vote
from .user import User

__all__ = [
    "Nomination",
    "REASON_MAX_LENGTH",
    "User",
    "Vote",
]
