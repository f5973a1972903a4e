"""Service layer helpers."""

from .errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    RateLimited,
    ServiceError,
    Unauthorized,
)
from .leaderboard import fetch_leaderboard, fetch_user_standing
from .nominations import (
    create_nomination,
    fetch_nomination,
    fetch_nominations,
    fetch_nominations_paginated,
    received_by,
    submitted_by,
    voted_by,
)
from .rate_limit import RATE_LIMITS, RateLimiter, check_rate_limit, get_rate_limit_status
from .votes import cast_vote, remove_vote

__all__ = [
    "Conflict",
    "Forbidden",
    "InvalidInput",
    "NotFound",
    "RATE_LIMITS",
    "RateLimited",
    "RateLimiter",
    "ServiceError",
    "Unauthorized",
    "cast_vote",
    "check_rate_limit",
    "create_nomination",
    "fetch_leaderboard",
    "fetch_nomination",
    "fetch_nominations",
    "fetch_nominations_paginated",
    "fetch_user_standing",
    "get_rate_limit_status",
    "received_by",
    "remove_vote",
    "submitted_by",
    "voted_by",
]
