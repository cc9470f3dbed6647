from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
import redis

from gamehub.api.deps import get_app_settings, get_redis
from gamehub.api.models import AvatarRequest, LoginRequest, PortalContextResponse, ThemeRequest
from gamehub.portal_context import PortalContext, init_portal, login, logout, set_avatar, set_theme
from gamehub.settings import Settings

router = APIRouter(prefix="/api/portal")


def _response(ctx: PortalContext, settings: Settings) -> PortalContextResponse:
    return PortalContextResponse(
        theme=ctx.theme,
        authenticated=ctx.authenticated,
        user_id=ctx.user_id,
        profile=ctx.profile,
        require_auth=settings.require_auth,
    )


@router.get("", response_model=PortalContextResponse)
async def get_portal_route(
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> PortalContextResponse:
    return _response(init_portal(r=r), settings)


@router.put("/theme", response_model=PortalContextResponse)
async def set_theme_route(
    payload: ThemeRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> PortalContextResponse:
    return _response(set_theme(r=r, theme=payload.theme), settings)


@router.post("/login", response_model=PortalContextResponse)
async def login_route(
    payload: LoginRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> PortalContextResponse:
    try:
        ctx = login(r=r, user_id=payload.user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return _response(ctx, settings)


@router.put("/avatar", response_model=PortalContextResponse)
async def set_avatar_route(
    payload: AvatarRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> PortalContextResponse:
    try:
        ctx = set_avatar(r=r, avatar=payload.avatar)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _response(ctx, settings)


@router.post("/logout", response_model=PortalContextResponse)
async def logout_route(
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> PortalContextResponse:
    return _response(logout(r=r), settings)
