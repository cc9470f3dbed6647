from __future__ import annotations

import pytest

from gamehub.games.base import Direction, IntentKind
from gamehub.input_adapter import InputContext, InputEvent, InvalidInput, PointerState, translate


def _key(key: str) -> InputEvent:
    return InputEvent(type="keydown", key=key)


def test_snake_arrows_and_wasd() -> None:
    assert translate("snake", _key("ArrowUp")).intent.direction == Direction.up
    assert translate("snake", _key("D")).intent.direction == Direction.right
    assert translate("snake", _key("x")).intent is None


def test_snake_rejects_reversal_of_last_move() -> None:
    ctx = InputContext(pointer=PointerState(), last_direction=Direction.right)
    assert translate("snake", _key("ArrowLeft"), ctx).intent is None
    assert translate("snake", _key("ArrowDown"), ctx).intent is not None


@pytest.mark.parametrize("game", ["flappy_bird", "dino_run"])
def test_space_and_click_jump(game: str) -> None:
    assert translate(game, _key(" ")).intent.kind == IntentKind.jump
    assert translate(game, InputEvent(type="click", x=1, y=1)).intent.kind == IntentKind.jump
    assert translate(game, _key("q")).intent is None


def test_pong_pointer_and_keys() -> None:
    intent = translate("pong", InputEvent(type="pointermove", x=10, y=150)).intent
    assert intent.kind == IntentKind.paddle and intent.y == 150
    assert translate("pong", _key("ArrowUp")).intent.dx == -20


def test_breakout_pointer_uses_x() -> None:
    intent = translate("breakout", InputEvent(type="touchmove", x=220, y=5)).intent
    assert intent.x == 220
    assert translate("breakout", _key("ArrowRight")).intent.dx == 20


def test_board_clicks() -> None:
    assert translate("tictactoe", InputEvent(type="click", cell=4)).intent.cell == 4
    with pytest.raises(InvalidInput):
        translate("tictactoe", InputEvent(type="click", cell=9))

    intent = translate("chess", InputEvent(type="click", row=6, col=4)).intent
    assert (intent.row, intent.col) == (6, 4)
    with pytest.raises(InvalidInput):
        translate("chess", InputEvent(type="click", row=8, col=0))


def test_sudoku_digits_clear_and_hint() -> None:
    place = translate("sudoku", InputEvent(type="keydown", key="7", row=0, col=2)).intent
    assert place.kind == IntentKind.place and place.value == 7
    assert translate("sudoku", InputEvent(type="keydown", key="Backspace", row=0, col=2)).intent.kind == IntentKind.clear
    assert translate("sudoku", InputEvent(type="keydown", key="h", row=0, col=2)).intent.kind == IntentKind.hint

    picked = translate("sudoku", InputEvent(type="click", row=1, col=1, value=3)).intent
    assert picked.kind == IntentKind.place and picked.value == 3


def test_sudoku_malformed_input() -> None:
    with pytest.raises(InvalidInput):
        translate("sudoku", InputEvent(type="click", row=0, col=2, value=10))
    with pytest.raises(InvalidInput):
        translate("sudoku", _key("5"))
    # InvalidInput is a ValueError so routes map it to 422.
    with pytest.raises(ValueError):
        translate("sudoku", InputEvent(type="keydown", key="5", row=9, col=0))


def test_ludo_roll_and_token_keys() -> None:
    assert translate("ludo", _key("r")).intent.kind == IntentKind.roll
    assert translate("ludo", _key("3")).intent.token == 2
    assert translate("ludo", InputEvent(type="click", token=1)).intent.token == 1
    with pytest.raises(InvalidInput):
        translate("ludo", InputEvent(type="click", token=4))


def test_helix_drag_tracks_pointer() -> None:
    down = translate("helix_jump", InputEvent(type="pointerdown", x=100))
    assert down.intent is None
    assert down.pointer == PointerState(dragging=True, last_x=100)

    move = translate("helix_jump", InputEvent(type="pointermove", x=130), InputContext(pointer=down.pointer))
    assert move.intent.kind == IntentKind.rotate and move.intent.dx == 30
    assert move.pointer.last_x == 130

    up = translate("helix_jump", InputEvent(type="pointerup"), InputContext(pointer=move.pointer))
    assert up.pointer == PointerState()

    # Moves without a press do nothing.
    idle = translate("helix_jump", InputEvent(type="pointermove", x=200), InputContext(pointer=up.pointer))
    assert idle.intent is None


def test_unknown_game() -> None:
    with pytest.raises(ValueError):
        translate("minesweeper", _key("ArrowUp"))


def test_keyup_is_ignored() -> None:
    assert translate("snake", InputEvent(type="keyup", key="ArrowUp")).intent is None
    assert translate("flappy_bird", InputEvent(type="keyup", key=" ")).intent is None


def test_mouse_events_map_like_pointer_events() -> None:
    intent = translate("pong", InputEvent(type="mousemove", y=200)).intent
    assert intent.kind == IntentKind.paddle and intent.y == 200
    assert translate("dino_run", InputEvent(type="mousedown", x=1, y=1)).intent.kind == IntentKind.jump

    down = translate("helix_jump", InputEvent(type="mousedown", x=100))
    moved = translate("helix_jump", InputEvent(type="mousemove", x=130), InputContext(pointer=down.pointer))
    assert moved.intent.kind == IntentKind.rotate and moved.intent.dx == 30
    assert translate("helix_jump", InputEvent(type="mouseup"), InputContext(pointer=moved.pointer)).pointer.dragging is False


def test_ignored_events_over_http_leave_state_unchanged(client_and_redis) -> None:
    client, _ = client_and_redis
    sid = client.post("/sessions", json={"game_type": "snake"}).json()["session_id"]
    before = client.post(f"/sessions/{sid}/start").json()

    resp = client.post(f"/sessions/{sid}/input", json={"type": "keyup", "key": "ArrowUp"})
    assert resp.status_code == 200
    assert resp.json()["state"] == before["state"]

    pong = client.post("/sessions", json={"game_type": "pong"}).json()["session_id"]
    client.post(f"/sessions/{pong}/start")
    moved = client.post(f"/sessions/{pong}/input", json={"type": "mousemove", "x": 10, "y": 200})
    assert moved.status_code == 200
    assert moved.json()["state"]["player"]["y"] == 170
