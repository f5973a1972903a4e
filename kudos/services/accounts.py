"""Member accounts created from Discord sign-ins."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from sqlmodel import Session

from ..core.log import LOGGER
from ..models import User

DISCORD_CDN = "https://cdn.discordapp.com"


def discord_avatar_url(profile: Mapping[str, Any]) -> str:
    """Custom avatar if set, otherwise one of Discord's five default embeds."""

    user_id = profile.get("id")
    avatar = profile.get("avatar")
    if avatar:
        return f"{DISCORD_CDN}/avatars/{user_id}/{avatar}.png"
    try:
        discriminator = int(profile.get("discriminator") or 0)
    except (TypeError, ValueError):
        discriminator = 0
    return f"{DISCORD_CDN}/embed/avatars/{discriminator % 5}.png"


def discord_profile_to_user(profile: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a Discord ``/users/@me`` payload onto ``User`` fields."""

    discord_id = str(profile["id"])
    return {
        "id": discord_id,
        "name": profile.get("global_name") or profile.get("username"),
        "email": profile.get("email"),
        "image": discord_avatar_url(profile),
        "discord_id": discord_id,
    }


def upsert_discord_user(session: Session, profile: Mapping[str, Any]) -> User:
    fields = discord_profile_to_user(profile)
    user: Optional[User] = session.get(User, fields["id"])

    if user is None:
        user = User(points=0, **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        LOGGER.info(f"Created member {user.id} ({user.name})")
        return user

    changed = False
    for key, value in fields.items():
        if value and getattr(user, key) != value:
            setattr(user, key, value)
            changed = True
    if changed:
        session.add(user)
        session.commit()
        session.refresh(user)
    return user


__all__ = ["discord_avatar_url", "discord_profile_to_user", "upsert_discord_user"]
