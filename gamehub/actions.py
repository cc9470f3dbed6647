from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

import redis

from gamehub.api.models import GameSession, SessionStatus
from gamehub.core.events import EventType, SessionEvent
from gamehub.fsm import SessionFSM
from gamehub.games.base import Direction, Outcome
from gamehub.input_adapter import InputContext, InputEvent, translate
from gamehub.lock import session_lock
from gamehub.render import Frame, apply_status_overlay
from gamehub.session_store import draw_rng, engine_for, require_session, reset_game_state, save_session
from gamehub.streams import publish_event
from gamehub.turn_processing.validators import ValidationContext, pipeline_for_action
from gamehub.user_store import create_score

logger = logging.getLogger(__name__)

ActionName = Literal["start", "pause", "resume", "restart", "input", "tick"]

MAX_TICKS_PER_REQUEST = 1_000


@dataclass(frozen=True, slots=True)
class ActionResult:
    session: GameSession
    event_ids: list[str]
    # Ticks actually applied (tick action only); may stop short on a terminal state.
    ticks_applied: int = 0


def render_session(session: GameSession) -> Frame:
    """Full redraw of the session's current state, with the status banner applied."""

    engine = engine_for(session)
    frame = engine.render(engine.load(session.state))
    return apply_status_overlay(frame, status=session.status.value, score=session.score)


def _last_direction(session: GameSession) -> Direction | None:
    raw = session.state.get("last_moved") or session.state.get("direction")
    return Direction(raw) if raw else None


def _settle(*, r: redis.Redis, session: GameSession, fsm: SessionFSM, events: list[SessionEvent]) -> None:
    """Refresh the score and move the FSM to over/won once the engine reports a terminal outcome."""

    engine = engine_for(session)
    state = engine.load(session.state)
    session.score = engine.score(state)
    if session.status != SessionStatus.running:
        return

    outcome = engine.outcome(state)
    if outcome == Outcome.ongoing:
        return

    fsm.apply("win" if outcome == Outcome.won else "lose")
    event_type: EventType = "SESSION_WON" if outcome == Outcome.won else "SESSION_OVER"
    events.append(
        SessionEvent.now(
            type=event_type,
            session_id=str(session.session_id),
            tick=session.ticks,
            payload={"score": session.score},
        )
    )
    logger.info(
        "session finished session_id=%s game=%s status=%s score=%s ticks=%s",
        session.session_id,
        session.game_type.value,
        session.status.value,
        session.score,
        session.ticks,
    )
    _record_score(r=r, session=session, events=events)


def _record_score(*, r: redis.Redis, session: GameSession, events: list[SessionEvent]) -> None:
    if session.user_id is None or session.score_recorded:
        return
    try:
        entry = create_score(r=r, user_id=session.user_id, game_type=session.game_type.value, score=session.score)
    except ValueError as e:
        # The user may have been deleted mid-game; the session still finishes.
        logger.warning("score not recorded session_id=%s user_id=%s: %s", session.session_id, session.user_id, e)
    else:
        events.append(
            SessionEvent.now(
                type="SCORE_RECORDED",
                session_id=str(session.session_id),
                tick=session.ticks,
                payload={"score_id": entry.id, "score": entry.score, "user_id": session.user_id},
            )
        )
        logger.info("score recorded session_id=%s user_id=%s score=%s", session.session_id, session.user_id, entry.score)
    session.score_recorded = True


def apply_ticks(*, r: redis.Redis, session: GameSession, fsm: SessionFSM, n: int, events: list[SessionEvent]) -> int:
    """Advance a running session by up to `n` ticks; stops at the first terminal state."""

    engine = engine_for(session)
    applied = 0
    state = engine.load(session.state)
    for _ in range(n):
        state = engine.tick(state, draw_rng(session))
        session.ticks += 1
        applied += 1
        if engine.outcome(state) != Outcome.ongoing:
            break
    session.state = engine.dump(state)
    _settle(r=r, session=session, fsm=fsm, events=events)
    return applied


def apply_input(*, r: redis.Redis, session: GameSession, fsm: SessionFSM, event: InputEvent, events: list[SessionEvent]) -> bool:
    """Translate and apply one raw input event. Returns True if the game state changed."""

    engine = engine_for(session)
    ctx = InputContext(pointer=session.pointer, last_direction=_last_direction(session))
    translation = translate(session.game_type, event, ctx)
    session.pointer = translation.pointer
    if translation.intent is None:
        return False

    before = session.state
    state = engine.apply_intent(engine.load(session.state), translation.intent, draw_rng(session))
    session.state = engine.dump(state)
    changed = session.state != before
    if changed:
        events.append(
            SessionEvent.now(
                type="INPUT_APPLIED",
                session_id=str(session.session_id),
                tick=session.ticks,
                payload={"intent": translation.intent.kind.value},
            )
        )
    _settle(r=r, session=session, fsm=fsm, events=events)
    return changed


_LIFECYCLE_EVENTS: dict[str, EventType] = {
    "start": "SESSION_STARTED",
    "pause": "SESSION_PAUSED",
    "resume": "SESSION_RESUMED",
    "restart": "SESSION_RESTARTED",
}


def dispatch_action(
    *,
    r: redis.Redis,
    session_id: UUID,
    action: ActionName,
    event: InputEvent | None = None,
    n: int = 1,
) -> ActionResult:
    """Entry point for HTTP routes and the tick loop.

    Applies an action by:
    - acquiring a per-session lock
    - loading the session
    - validating the action against the session status
    - driving the FSM and the game engine
    - persisting the session
    - appending lifecycle events to the session's Redis Stream
    """

    sid = str(session_id)

    with session_lock(r=r, session_id=sid):
        session = require_session(r=r, session_id=session_id)
        pipeline_for_action(action).validate(ctx=ValidationContext(session_id=sid, action=action), session=session)

        fsm = SessionFSM(session)
        events: list[SessionEvent] = []
        ticks_applied = 0

        if action == "start":
            reset_game_state(session)
            fsm.apply("begin")
        elif action == "pause":
            fsm.apply("pause")
        elif action == "resume":
            fsm.apply("resume")
        elif action == "restart":
            fsm.apply("restart")
            reset_game_state(session)
        elif action == "input":
            if event is None:
                raise ValueError("Input action requires an event")
            apply_input(r=r, session=session, fsm=fsm, event=event, events=events)
        elif action == "tick":
            if not 1 <= n <= MAX_TICKS_PER_REQUEST:
                raise ValueError(f"Tick count must be between 1 and {MAX_TICKS_PER_REQUEST}")
            ticks_applied = apply_ticks(r=r, session=session, fsm=fsm, n=n, events=events)
        else:
            raise ValueError(f"Unknown action: {action}")

        if action in _LIFECYCLE_EVENTS:
            events.insert(
                0,
                SessionEvent.now(type=_LIFECYCLE_EVENTS[action], session_id=sid, tick=session.ticks, payload={}),
            )
            logger.info(
                "session %s session_id=%s game=%s status=%s",
                action,
                sid,
                session.game_type.value,
                session.status.value,
            )

        save_session(r=r, session=session)
        ids = [publish_event(r=r, event=e) for e in events]
        return ActionResult(session=session, event_ids=ids, ticks_applied=ticks_applied)
