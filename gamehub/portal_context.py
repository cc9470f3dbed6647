from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace

import redis

from gamehub.api.models import Theme, User, UserPublic
from gamehub.user_store import get_user, update_user

logger = logging.getLogger(__name__)

PORTAL_KEY = "gamehub:portal"


@dataclass(frozen=True, slots=True)
class PortalContext:
    """Process-wide UI context: theme plus the (externally) authenticated user.

    Immutable; every change produces a new instance that replaces the current one.
    """

    theme: Theme = "light"
    user_id: int | None = None
    profile: UserPublic | None = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    def to_json(self) -> str:
        return json.dumps(
            {
                "theme": self.theme,
                "user_id": self.user_id,
                "profile": self.profile.model_dump(mode="json") if self.profile else None,
            }
        )

    @staticmethod
    def from_json(raw: str) -> "PortalContext":
        data = json.loads(raw)
        profile = data.get("profile")
        return PortalContext(
            theme=data.get("theme", "light"),
            user_id=data.get("user_id"),
            profile=UserPublic.model_validate(profile) if profile else None,
        )


_PORTAL: PortalContext | None = None


def init_portal(*, r: redis.Redis) -> PortalContext:
    """Load the persisted context once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    """

    global _PORTAL
    if _PORTAL is None:
        raw = r.get(PORTAL_KEY)
        _PORTAL = PortalContext.from_json(raw) if raw else PortalContext()
        logger.info("portal context loaded theme=%s user_id=%s", _PORTAL.theme, _PORTAL.user_id)
    return _PORTAL


def reset_portal_for_tests() -> None:
    global _PORTAL
    _PORTAL = None


def get_portal() -> PortalContext:
    if _PORTAL is None:
        raise RuntimeError("Portal context not initialized. Call init_portal() at startup.")
    return _PORTAL


def _replace(*, r: redis.Redis, ctx: PortalContext) -> PortalContext:
    global _PORTAL
    r.set(PORTAL_KEY, ctx.to_json())
    _PORTAL = ctx
    return ctx


def set_theme(*, r: redis.Redis, theme: Theme) -> PortalContext:
    return _replace(r=r, ctx=replace(init_portal(r=r), theme=theme))


def login(*, r: redis.Redis, user_id: int) -> PortalContext:
    user = get_user(r=r, user_id=user_id)
    if user is None:
        raise ValueError("User not found")
    profile = UserPublic.model_validate(user.model_dump())
    logger.info("portal login user_id=%s", user_id)
    return _replace(r=r, ctx=replace(init_portal(r=r), user_id=user_id, profile=profile))


def set_avatar(*, r: redis.Redis, avatar: int) -> PortalContext:
    ctx = init_portal(r=r)
    if ctx.user_id is None:
        raise ValueError("Not logged in")
    user = update_user(r=r, user_id=ctx.user_id, changes={"avatar": avatar})
    if user is None:
        raise ValueError("User not found")
    return _replace(r=r, ctx=replace(ctx, profile=UserPublic.model_validate(user.model_dump())))


def logout(*, r: redis.Redis) -> PortalContext:
    """Clear the authenticated user; the theme survives."""

    ctx = init_portal(r=r)
    logger.info("portal logout user_id=%s", ctx.user_id)
    return _replace(r=r, ctx=PortalContext(theme=ctx.theme))


def sync_user(*, r: redis.Redis, user: User) -> PortalContext:
    """Refresh the cached profile when the logged-in user was edited elsewhere."""

    ctx = init_portal(r=r)
    if ctx.user_id != user.id:
        return ctx
    return _replace(r=r, ctx=replace(ctx, profile=UserPublic.model_validate(user.model_dump())))


def forget_user(*, r: redis.Redis, user_id: int) -> PortalContext:
    """Log out if the deleted user is the one currently logged in."""

    ctx = init_portal(r=r)
    if ctx.user_id != user_id:
        return ctx
    return logout(r=r)
