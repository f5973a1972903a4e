"""Aggregate API routers."""

from fastapi import APIRouter

from .auth import router as auth_router
from .leaderboard import router as leaderboard_router
from .nominations import router as nominations_router
from .system import router as system_router
from .users import router as users_router
from .votes import router as votes_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    leaderboard_router,
    nominations_router,
    votes_router,
    users_router,
    auth_router,
)

__all__ = ["ALL_ROUTERS"]
