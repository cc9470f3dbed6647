from __future__ import annotations

import logging
import random
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from gamehub.api.models import GameSession, SessionStatus
from gamehub.core.events import SessionEvent
from gamehub.games.base import GameEngine
from gamehub.games.registry import get_engine
from gamehub.input_adapter import PointerState
from gamehub.settings import get_settings
from gamehub.streams import delete_stream, publish_event

logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "gamehub:sessions"
SESSION_KEY_PREFIX = "gamehub:session:"  # + {uuid}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(session_id: UUID) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def draw_rng(session: GameSession) -> random.Random:
    """RNG for the next engine call; advances the session's draw counter."""

    rng = random.Random(f"{session.seed}:{session.step}")
    session.step += 1
    return rng


def engine_for(session: GameSession) -> GameEngine:
    return get_engine(session.game_type)


def reset_game_state(session: GameSession) -> None:
    """Fresh engine state for the session's game and mode; clears tick/score bookkeeping."""

    engine = engine_for(session)
    state = engine.new_state(mode=session.mode, rng=draw_rng(session))
    session.state = engine.dump(state)
    session.score = engine.score(state)
    session.ticks = 0
    session.score_recorded = False
    session.pointer = PointerState()


def save_session(*, r: redis.Redis, session: GameSession) -> None:
    session.last_updated_at = _now()
    ttl_s = get_settings().session_ttl_s
    r.set(_session_key(session.session_id), session.model_dump_json(), ex=ttl_s or None)


def get_session(*, r: redis.Redis, session_id: UUID) -> GameSession | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return GameSession.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: UUID) -> GameSession:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise ValueError("Session not found")
    return session


def create_session(
    *,
    r: redis.Redis,
    game_type: str,
    mode: str | None = None,
    user_id: int | None = None,
) -> GameSession:
    engine = get_engine(game_type)
    resolved_mode = engine.resolve_mode(mode)

    now = _now()
    seed = random.SystemRandom().randint(1, 2**31 - 1)
    session = GameSession(
        session_id=uuid4(),
        game_type=engine.game_type,
        mode=resolved_mode,
        status=SessionStatus.idle,
        created_at=now,
        last_updated_at=now,
        seed=seed,
        tick_ms=engine.tick_ms,
        user_id=user_id,
    )
    reset_game_state(session)

    save_session(r=r, session=session)
    r.sadd(SESSIONS_SET_KEY, str(session.session_id))
    publish_event(
        r=r,
        event=SessionEvent.now(
            type="SESSION_CREATED",
            session_id=str(session.session_id),
            tick=0,
            payload={"game_type": session.game_type.value, "mode": session.mode},
        ),
    )
    logger.info(
        "session created session_id=%s game=%s mode=%s user_id=%s",
        session.session_id,
        session.game_type.value,
        session.mode,
        session.user_id,
    )
    return session


def list_sessions(*, r: redis.Redis) -> list[GameSession]:
    ids = sorted(r.smembers(SESSIONS_SET_KEY))
    out: list[GameSession] = []
    for sid in ids:
        try:
            session_id = UUID(sid)
        except ValueError:
            continue
        session = get_session(r=r, session_id=session_id)
        if session is None:
            # Expired via TTL; drop the dangling index entry.
            r.srem(SESSIONS_SET_KEY, sid)
            continue
        out.append(session)
    out.sort(key=lambda s: s.created_at, reverse=True)
    return out


def delete_session(*, r: redis.Redis, session_id: UUID) -> bool:
    removed = r.delete(_session_key(session_id))
    r.srem(SESSIONS_SET_KEY, str(session_id))
    delete_stream(r=r, session_id=str(session_id))
    return bool(removed)
