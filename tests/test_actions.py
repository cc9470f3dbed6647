from __future__ import annotations

import pytest

from gamehub.actions import MAX_TICKS_PER_REQUEST, dispatch_action, render_session
from gamehub.api.models import SessionStatus
from gamehub.games.dino import DINO_X, GROUND_Y, DinoEngine, Obstacle
from gamehub.input_adapter import InputEvent
from gamehub.lock import session_lock
from gamehub.session_store import create_session, list_sessions, require_session, save_session
from gamehub.streams import read_events
from gamehub.user_store import create_user, get_user_scores


def _user(r) -> int:
    return create_user(r=r, data={"email": "ada@example.com", "first_name": "Ada", "last_name": "L", "avatar": 1}).id


def _crash_next_tick(r, session) -> None:
    engine = DinoEngine()
    state = engine.load(session.state)
    state.obstacles = [Obstacle(x=DINO_X + 10, y=GROUND_Y - 40, width=20, height=40, type="cactus")]
    state.score = 41
    session.state = engine.dump(state)
    save_session(r=r, session=session)


def test_create_resolves_default_mode_and_rejects_unknown(redis_client) -> None:
    session = create_session(r=redis_client, game_type="ludo")
    assert session.mode == "1p-3cpu"
    assert session.status == SessionStatus.idle
    assert session.tick_ms is None

    with pytest.raises(ValueError, match="Unsupported mode"):
        create_session(r=redis_client, game_type="ludo", mode="9p")
    with pytest.raises(ValueError, match="Unknown game type"):
        create_session(r=redis_client, game_type="minesweeper")


def test_sessions_list_newest_first(redis_client) -> None:
    first = create_session(r=redis_client, game_type="snake")
    second = create_session(r=redis_client, game_type="pong")
    ids = [s.session_id for s in list_sessions(r=redis_client)]
    assert ids == [second.session_id, first.session_id]


def test_lifecycle_events_are_streamed(redis_client) -> None:
    session = create_session(r=redis_client, game_type="snake")
    sid = session.session_id
    dispatch_action(r=redis_client, session_id=sid, action="start")
    dispatch_action(r=redis_client, session_id=sid, action="input", event=InputEvent(type="keydown", key="ArrowUp"))
    dispatch_action(r=redis_client, session_id=sid, action="pause")

    types = [fields["type"] for _, fields in read_events(r=redis_client, session_id=str(sid))]
    assert types == ["SESSION_CREATED", "SESSION_STARTED", "INPUT_APPLIED", "SESSION_PAUSED"]


def test_ignored_input_leaves_state_alone(redis_client) -> None:
    session = create_session(r=redis_client, game_type="snake")
    sid = session.session_id
    before = dispatch_action(r=redis_client, session_id=sid, action="start").session
    after = dispatch_action(
        r=redis_client, session_id=sid, action="input", event=InputEvent(type="keydown", key="q")
    ).session
    assert after.state == before.state


def test_tick_bounds(redis_client) -> None:
    session = create_session(r=redis_client, game_type="dino_run")
    dispatch_action(r=redis_client, session_id=session.session_id, action="start")
    with pytest.raises(ValueError, match="Tick count"):
        dispatch_action(r=redis_client, session_id=session.session_id, action="tick", n=MAX_TICKS_PER_REQUEST + 1)

    result = dispatch_action(r=redis_client, session_id=session.session_id, action="tick", n=5)
    assert result.ticks_applied == 5
    assert result.session.ticks == 5


def test_terminal_tick_records_score_once(redis_client) -> None:
    user_id = _user(redis_client)
    session = create_session(r=redis_client, game_type="dino_run", user_id=user_id)
    session = dispatch_action(r=redis_client, session_id=session.session_id, action="start").session
    _crash_next_tick(redis_client, session)

    result = dispatch_action(r=redis_client, session_id=session.session_id, action="tick", n=10)
    assert result.ticks_applied == 1
    assert result.session.status == SessionStatus.over
    assert result.session.score == 42
    assert result.session.score_recorded

    scores = get_user_scores(r=redis_client, user_id=user_id)
    assert [(s.game_type, s.score) for s in scores] == [("dino_run", 42)]

    with pytest.raises(ValueError, match="restart to play again"):
        dispatch_action(r=redis_client, session_id=session.session_id, action="tick")

    restarted = dispatch_action(r=redis_client, session_id=session.session_id, action="restart").session
    assert restarted.status == SessionStatus.idle
    assert restarted.ticks == 0
    assert restarted.score == 0
    assert restarted.score_recorded is False
    assert len(get_user_scores(r=redis_client, user_id=user_id)) == 1


def test_busy_session(redis_client) -> None:
    session = create_session(r=redis_client, game_type="snake")
    with session_lock(r=redis_client, session_id=str(session.session_id)):
        with pytest.raises(ValueError, match="busy"):
            dispatch_action(r=redis_client, session_id=session.session_id, action="start")
    assert require_session(r=redis_client, session_id=session.session_id).status == SessionStatus.idle


def test_render_session_banners(redis_client) -> None:
    session = create_session(r=redis_client, game_type="tictactoe")
    frame = render_session(session)
    assert frame.status == "idle"
    assert frame.banner is not None and frame.banner.title == "Ready"
    assert len([op for op in frame.ops if op.kind == "cell"]) == 9

    running = dispatch_action(r=redis_client, session_id=session.session_id, action="start").session
    assert render_session(running).banner is None
