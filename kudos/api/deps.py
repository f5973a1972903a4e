"""Request-scoped dependencies: identity and rate limiting."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlmodel import Session

from ..core import config
from ..core.database import get_session
from ..core.log import LOGGER
from ..models import User
from ..services.errors import Unauthorized
from ..services.rate_limit import RateLimiter, check_rate_limit


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: Optional[str] = None
    image: Optional[str] = None


_TEST_USER = CurrentUser(id="test-user", name="Test User")


def _test_mode_user() -> CurrentUser:
    raw = config.AUTH_TEST_USER
    if raw:
        try:
            parsed = json.loads(raw)
        except ValueError:
            LOGGER.warning("Failed to parse AUTH_TEST_USER")
        else:
            if isinstance(parsed, dict) and isinstance(parsed.get("id"), str):
                return CurrentUser(
                    id=parsed["id"], name=parsed.get("name"), image=parsed.get("image")
                )
    return _TEST_USER


def get_current_user(
    request: Request, session: Session = Depends(get_session)
) -> Optional[CurrentUser]:
    """The signed-in member, or ``None`` for anonymous requests."""

    if config.AUTH_TEST_MODE:
        return _test_mode_user()

    uid = request.session.get("uid")
    if not uid:
        return None

    user = session.get(User, str(uid))
    if user is None:
        request.session.clear()
        return None
    return CurrentUser(id=user.id, name=user.name, image=user.image)


def require_user(user: Optional[CurrentUser] = Depends(get_current_user)) -> CurrentUser:
    if user is None:
        raise Unauthorized("Unauthorized")
    return user


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def rate_limited(category: str) -> Callable[..., CurrentUser]:
    """Dependency requiring a member and charging one ``category`` request."""

    def dependency(
        user: CurrentUser = Depends(require_user),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> CurrentUser:
        check_rate_limit(limiter, user.id, category)
        return user

    return dependency


__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_rate_limiter",
    "rate_limited",
    "require_user",
]
