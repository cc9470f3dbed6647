from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel

from gamehub.games.base import OPPOSITE, Direction, GameType, Intent, IntentKind

EventType = Literal[
    "keydown",
    "keyup",
    "pointerdown",
    "pointermove",
    "pointerup",
    "click",
    "touchstart",
    "touchmove",
    "touchend",
    "mousedown",
    "mousemove",
    "mouseup",
]

# Pixels moved per arrow-key press for paddles and tower rotation.
KEY_STEP = 20


class InvalidInput(ValueError):
    """Raised for malformed input that cannot be mapped to a game intent."""


class InputEvent(BaseModel):
    """A raw UI event.

    Canvas coordinates are in the game's own pixel space. Board games send the
    clicked cell (tic-tac-toe), square (`row`/`col`) or token directly.
    """

    type: EventType
    key: str | None = None
    x: float | None = None
    y: float | None = None
    cell: int | None = None
    row: int | None = None
    col: int | None = None
    value: int | None = None
    token: int | None = None


class PointerState(BaseModel):
    """Drag tracking carried on the session between input events."""

    dragging: bool = False
    last_x: float | None = None


@dataclass(frozen=True, slots=True)
class InputContext:
    pointer: PointerState
    # Heading of the last applied snake move.
    last_direction: Direction | None = None


@dataclass(frozen=True, slots=True)
class Translation:
    intent: Intent | None
    pointer: PointerState


DIRECTION_KEYS: dict[str, Direction] = {
    "ArrowUp": Direction.up,
    "ArrowDown": Direction.down,
    "ArrowLeft": Direction.left,
    "ArrowRight": Direction.right,
    "w": Direction.up,
    "s": Direction.down,
    "a": Direction.left,
    "d": Direction.right,
}

SPACE_KEYS = frozenset({" ", "Space", "Spacebar"})
# Mouse events map like their pointer counterparts; keyup is accepted and ignored.
PRESS_EVENTS = frozenset({"click", "pointerdown", "touchstart", "mousedown"})
MOVE_EVENTS = frozenset({"pointermove", "touchmove", "mousemove"})
RELEASE_EVENTS = frozenset({"pointerup", "touchend", "mouseup"})
CLEAR_KEYS = frozenset({"Backspace", "Delete", "0"})
DIGIT_KEYS = frozenset("123456789")


def _key(event: InputEvent) -> str | None:
    if event.type != "keydown" or event.key is None:
        return None
    # Single letters are matched case-insensitively (WASD with caps lock).
    return event.key.lower() if len(event.key) == 1 else event.key


def _snake(event: InputEvent, ctx: InputContext) -> Intent | None:
    key = _key(event)
    if key is None or key not in DIRECTION_KEYS:
        return None
    direction = DIRECTION_KEYS[key]
    if ctx.last_direction is not None and OPPOSITE[ctx.last_direction] == direction:
        return None
    return Intent(kind=IntentKind.direction, direction=direction)


def _flappy(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type in PRESS_EVENTS or _key(event) in SPACE_KEYS:
        return Intent(kind=IntentKind.jump)
    return None


def _dino(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type in PRESS_EVENTS or _key(event) in SPACE_KEYS | {"ArrowUp"}:
        return Intent(kind=IntentKind.jump)
    return None


def _pong(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type in MOVE_EVENTS and event.y is not None:
        return Intent(kind=IntentKind.paddle, y=event.y)
    key = _key(event)
    if key == "ArrowUp":
        return Intent(kind=IntentKind.paddle, dx=-KEY_STEP)
    if key == "ArrowDown":
        return Intent(kind=IntentKind.paddle, dx=KEY_STEP)
    return None


def _breakout(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type in MOVE_EVENTS and event.x is not None:
        return Intent(kind=IntentKind.paddle, x=event.x)
    key = _key(event)
    if key == "ArrowLeft":
        return Intent(kind=IntentKind.paddle, dx=-KEY_STEP)
    if key == "ArrowRight":
        return Intent(kind=IntentKind.paddle, dx=KEY_STEP)
    return None


def _tictactoe(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type not in PRESS_EVENTS or event.cell is None:
        return None
    if not 0 <= event.cell < 9:
        raise InvalidInput(f"Cell out of range: {event.cell}")
    return Intent(kind=IntentKind.select, cell=event.cell)


def _chess(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type not in PRESS_EVENTS or event.row is None or event.col is None:
        return None
    if not (0 <= event.row < 8 and 0 <= event.col < 8):
        raise InvalidInput(f"Square out of range: ({event.row}, {event.col})")
    return Intent(kind=IntentKind.select, row=event.row, col=event.col)


def _require_cell(event: InputEvent) -> tuple[int, int]:
    if event.row is None or event.col is None:
        raise InvalidInput("A sudoku cell (row, col) is required")
    if not (0 <= event.row < 9 and 0 <= event.col < 9):
        raise InvalidInput(f"Cell out of range: ({event.row}, {event.col})")
    return event.row, event.col


def _sudoku(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.value is not None:
        row, col = _require_cell(event)
        if not 1 <= event.value <= 9:
            raise InvalidInput(f"Value must be between 1 and 9, got {event.value}")
        return Intent(kind=IntentKind.place, row=row, col=col, value=event.value)

    key = _key(event)
    if key is None:
        return None
    if key in CLEAR_KEYS:
        row, col = _require_cell(event)
        return Intent(kind=IntentKind.clear, row=row, col=col)
    if key == "h":
        row, col = _require_cell(event)
        return Intent(kind=IntentKind.hint, row=row, col=col)
    if key in DIGIT_KEYS:
        row, col = _require_cell(event)
        return Intent(kind=IntentKind.place, row=row, col=col, value=int(key))
    return None


def _ludo(event: InputEvent, ctx: InputContext) -> Intent | None:
    if event.type in PRESS_EVENTS and event.token is not None:
        if not 0 <= event.token < 4:
            raise InvalidInput(f"Token out of range: {event.token}")
        return Intent(kind=IntentKind.move_token, token=event.token)
    key = _key(event)
    if key == "r" or key in SPACE_KEYS:
        return Intent(kind=IntentKind.roll)
    if key in {"1", "2", "3", "4"}:
        return Intent(kind=IntentKind.move_token, token=int(key) - 1)
    return None


def _helix(event: InputEvent, ctx: InputContext) -> Translation:
    pointer = ctx.pointer
    if event.type in ("pointerdown", "touchstart", "mousedown") and event.x is not None:
        return Translation(None, PointerState(dragging=True, last_x=event.x))
    if event.type in RELEASE_EVENTS:
        return Translation(None, PointerState())
    if event.type in MOVE_EVENTS and event.x is not None:
        if not pointer.dragging or pointer.last_x is None:
            return Translation(None, pointer)
        dx = event.x - pointer.last_x
        intent = Intent(kind=IntentKind.rotate, dx=dx) if dx else None
        return Translation(intent, PointerState(dragging=True, last_x=event.x))
    key = _key(event)
    if key == "ArrowLeft":
        return Translation(Intent(kind=IntentKind.rotate, dx=-KEY_STEP), pointer)
    if key == "ArrowRight":
        return Translation(Intent(kind=IntentKind.rotate, dx=KEY_STEP), pointer)
    return Translation(None, pointer)


_STATELESS: dict[GameType, Callable[[InputEvent, InputContext], Intent | None]] = {
    GameType.snake: _snake,
    GameType.flappy_bird: _flappy,
    GameType.dino_run: _dino,
    GameType.pong: _pong,
    GameType.breakout: _breakout,
    GameType.tictactoe: _tictactoe,
    GameType.chess: _chess,
    GameType.sudoku: _sudoku,
    GameType.ludo: _ludo,
}


def translate(game_type: GameType | str, event: InputEvent, ctx: InputContext | None = None) -> Translation:
    """Map a raw event to a game intent.

    Returns `Translation(intent=None, ...)` for events the game ignores and
    raises `InvalidInput` for malformed ones.
    """

    ctx = ctx or InputContext(pointer=PointerState())
    game = GameType(game_type)
    if game == GameType.helix_jump:
        return _helix(event, ctx)
    return Translation(_STATELESS[game](event, ctx), ctx.pointer)
