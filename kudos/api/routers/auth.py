"""Discord OAuth authentication routes."""

from __future__ import annotations

from typing import Optional

from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from ...core import (
    DISCORD_CLIENT_ID,
    DISCORD_CLIENT_SECRET,
    FRONTEND_ORIGIN,
    LOGGER,
    OAUTH_REDIRECT_URL,
    get_session,
)
from ...services.accounts import upsert_discord_user
from ..deps import CurrentUser, get_current_user

router = APIRouter(tags=["auth"])

oauth = OAuth()

# Registered with placeholders when unset so the app can boot without credentials.
oauth.register(
    name="discord",
    client_id=DISCORD_CLIENT_ID or "dummy",
    client_secret=DISCORD_CLIENT_SECRET or "dummy",
    authorize_url="https://discord.com/oauth2/authorize",
    access_token_url="https://discord.com/api/oauth2/token",
    api_base_url="https://discord.com/api/",
    client_kwargs={"scope": "identify email"},
)


def _safe_next(next_url: Optional[str]) -> str:
    if next_url and FRONTEND_ORIGIN and str(next_url).startswith(FRONTEND_ORIGIN):
        return next_url
    return FRONTEND_ORIGIN or "/"


@router.get("/auth/discord/start")
async def auth_discord_start(request: Request, next: str | None = None):
    if not DISCORD_CLIENT_ID or not DISCORD_CLIENT_SECRET:
        raise HTTPException(
            status_code=500,
            detail="Discord OAuth not configured. Check DISCORD_CLIENT_ID and DISCORD_CLIENT_SECRET.",
        )

    if next:
        request.session["next"] = next
    return await oauth.discord.authorize_redirect(request, OAUTH_REDIRECT_URL)


@router.get("/auth/discord/callback")
async def auth_discord_callback(request: Request, session: Session = Depends(get_session)):
    try:
        token = await oauth.discord.authorize_access_token(request)
        response = await oauth.discord.get("users/@me", token=token)
        response.raise_for_status()
        profile = response.json()
    except OAuthError as exc:
        LOGGER.warning(f"Discord sign-in failed: {exc.error}")
        raise HTTPException(status_code=400, detail="Unable to complete Discord sign-in.") from exc

    if not profile.get("id"):
        raise HTTPException(status_code=400, detail="Unable to read Discord profile.")

    user = upsert_discord_user(session, profile)
    request.session["uid"] = user.id

    return RedirectResponse(_safe_next(request.session.pop("next", None)), status_code=302)


@router.post("/auth/logout")
def auth_logout(request: Request):
    request.session.clear()
    return JSONResponse({"ok": True})


@router.get("/me")
def me(user: Optional[CurrentUser] = Depends(get_current_user)):
    if user is None:
        return JSONResponse({"user": None})
    return JSONResponse({"user": {"id": user.id, "name": user.name, "image": user.image}})


__all__ = ["router"]
