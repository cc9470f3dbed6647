from __future__ import annotations

import random
from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from gamehub.render import Frame


class GameType(StrEnum):
    tictactoe = "tictactoe"
    snake = "snake"
    sudoku = "sudoku"
    chess = "chess"
    pong = "pong"
    flappy_bird = "flappy_bird"
    ludo = "ludo"
    breakout = "breakout"
    dino_run = "dino_run"
    helix_jump = "helix_jump"


class Outcome(StrEnum):
    ongoing = "ongoing"
    over = "over"
    won = "won"


class Direction(StrEnum):
    up = "up"
    down = "down"
    left = "left"
    right = "right"


OPPOSITE: dict[Direction, Direction] = {
    Direction.up: Direction.down,
    Direction.down: Direction.up,
    Direction.left: Direction.right,
    Direction.right: Direction.left,
}


class IntentKind(StrEnum):
    direction = "direction"
    jump = "jump"
    # Absolute paddle target (pointer) or relative step (keys) via `dx`.
    paddle = "paddle"
    select = "select"
    place = "place"
    clear = "clear"
    hint = "hint"
    roll = "roll"
    move_token = "move_token"
    rotate = "rotate"


class Intent(BaseModel):
    """A game-level action produced by the input adapter."""

    kind: IntentKind
    direction: Direction | None = None
    x: float | None = None
    y: float | None = None
    dx: float | None = None
    cell: int | None = None
    row: int | None = None
    col: int | None = None
    value: int | None = None
    token: int | None = None


S = TypeVar("S", bound=BaseModel)


class GameEngine(ABC, Generic[S]):
    """Rule engine + simulation step for one game.

    Engines never mutate their inputs: `apply_intent` and `tick` return the next
    state. Rejected intents return the state unchanged.
    """

    game_type: ClassVar[GameType]
    title: ClassVar[str]
    state_model: ClassVar[type[BaseModel]]
    # None => turn-based, no timer.
    tick_ms: ClassVar[int | None] = None
    modes: ClassVar[tuple[str, ...]] = ("single",)

    @property
    def default_mode(self) -> str:
        return self.modes[0]

    def resolve_mode(self, mode: str | None) -> str:
        if mode is None:
            return self.default_mode
        if mode not in self.modes:
            allowed = ",".join(self.modes)
            raise ValueError(f"Unsupported mode '{mode}' for {self.game_type.value} (allowed: {allowed})")
        return mode

    @abstractmethod
    def new_state(self, *, mode: str, rng: random.Random) -> S:
        raise NotImplementedError

    @abstractmethod
    def apply_intent(self, state: S, intent: Intent, rng: random.Random) -> S:
        raise NotImplementedError

    def tick(self, state: S, rng: random.Random) -> S:
        return state

    @abstractmethod
    def outcome(self, state: S) -> Outcome:
        raise NotImplementedError

    @abstractmethod
    def score(self, state: S) -> int:
        raise NotImplementedError

    def awaiting_human(self, state: S) -> bool:
        return True

    @abstractmethod
    def render(self, state: S) -> Frame:
        raise NotImplementedError

    def load(self, data: dict[str, Any]) -> S:
        return self.state_model.model_validate(data)  # type: ignore[return-value]

    def dump(self, state: S) -> dict[str, Any]:
        return state.model_dump(mode="json")
