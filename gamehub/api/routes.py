from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from fastapi.responses import PlainTextResponse
import redis

from gamehub.actions import ActionName, dispatch_action, render_session
from gamehub.api.deps import get_app_settings, get_redis
from gamehub.api.models import (
    CatalogEntryResponse,
    CatalogResponse,
    GameSession,
    SessionCreateRequest,
    SessionEventEntry,
    SessionEventsResponse,
    SessionListResponse,
    SessionStatus,
)
from gamehub.games.registry import catalog
from gamehub.input_adapter import InputEvent
from gamehub.portal_context import init_portal
from gamehub.render import Frame, frame_to_ascii
from gamehub.session_loop import publish_session, session_loop
from gamehub.session_store import create_session, delete_session, get_session, list_sessions
from gamehub.settings import Settings
from gamehub.streams import read_events
from gamehub.websocket_hub import hub

router = APIRouter()


@router.websocket("/ws/sessions/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    sid = str(session_id)
    await hub.connect(sid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(sid, websocket)
    except Exception:
        await hub.disconnect(sid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/health")
async def api_health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(tz=UTC).isoformat()}


@router.get("/games", response_model=CatalogResponse)
async def list_games_route() -> CatalogResponse:
    return CatalogResponse(
        games=[
            CatalogEntryResponse(
                game_type=e.game_type,
                title=e.title,
                modes=list(e.modes),
                default_mode=e.default_mode,
                tick_ms=e.tick_ms,
            )
            for e in catalog()
        ]
    )


def _require_session(r: redis.Redis, session_id: UUID) -> GameSession:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.post("/sessions", response_model=GameSession, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    r: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_app_settings),
) -> GameSession:
    user_id = payload.user_id
    if settings.require_auth:
        portal = init_portal(r=r)
        if not portal.authenticated:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
        # Sessions are played by whoever holds the portal.
        user_id = user_id or portal.user_id

    try:
        session = create_session(r=r, game_type=payload.game_type, mode=payload.mode, user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await hub.broadcast(str(session.session_id), {"type": "session_updated", "session_id": str(session.session_id)})
    return session


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(r: redis.Redis = Depends(get_redis)) -> SessionListResponse:
    return SessionListResponse(sessions=list_sessions(r=r))


@router.get("/sessions/{session_id}", response_model=GameSession)
async def get_session_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameSession:
    return _require_session(r, session_id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> Response:
    await session_loop.stop(session_id)
    if not delete_session(r=r, session_id=session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    await hub.broadcast(str(session_id), {"type": "session_deleted", "session_id": str(session_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def _run_action(
    r: redis.Redis,
    session_id: UUID,
    action: ActionName,
    *,
    event: InputEvent | None = None,
    n: int = 1,
) -> GameSession:
    try:
        session = dispatch_action(r=r, session_id=session_id, action=action, event=event, n=n).session
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    if session.status == SessionStatus.running:
        session_loop.ensure_running(session, r=r)
    else:
        await session_loop.stop(session_id)

    await publish_session(session)
    return session


@router.post("/sessions/{session_id}/start", response_model=GameSession)
async def start_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameSession:
    return await _run_action(r, session_id, "start")


@router.post("/sessions/{session_id}/pause", response_model=GameSession)
async def pause_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameSession:
    return await _run_action(r, session_id, "pause")


@router.post("/sessions/{session_id}/resume", response_model=GameSession)
async def resume_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameSession:
    return await _run_action(r, session_id, "resume")


@router.post("/sessions/{session_id}/restart", response_model=GameSession)
async def restart_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameSession:
    await session_loop.stop(session_id)
    return await _run_action(r, session_id, "restart")


@router.post("/sessions/{session_id}/input", response_model=GameSession)
async def input_route(session_id: UUID, payload: InputEvent, r: redis.Redis = Depends(get_redis)) -> GameSession:
    return await _run_action(r, session_id, "input", event=payload)


@router.post("/sessions/{session_id}/tick", response_model=GameSession)
async def tick_route(session_id: UUID, n: int = 1, r: redis.Redis = Depends(get_redis)) -> GameSession:
    """Manual stepping; used by tests and by clients when auto-ticking is off."""

    return await _run_action(r, session_id, "tick", n=n)


@router.get("/sessions/{session_id}/frame", response_model=Frame)
async def frame_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> Frame:
    return render_session(_require_session(r, session_id))


@router.get("/sessions/{session_id}/frame.txt", response_class=PlainTextResponse)
async def frame_text_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> str:
    return frame_to_ascii(render_session(_require_session(r, session_id)))


@router.get("/sessions/{session_id}/events", response_model=SessionEventsResponse)
async def session_events_route(
    session_id: UUID,
    count: int = Query(default=100),
    r: redis.Redis = Depends(get_redis),
) -> SessionEventsResponse:
    """Debug endpoint: read the session's lifecycle event stream."""

    if count < 1 or count > 1000:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 1000")
    _require_session(r, session_id)

    entries = read_events(r=r, session_id=str(session_id), count=count)
    return SessionEventsResponse(
        session_id=session_id,
        events=[SessionEventEntry(id=eid, fields=fields) for eid, fields in entries],
    )
