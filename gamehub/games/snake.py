from __future__ import annotations

import random

from pydantic import BaseModel, Field

from gamehub.games.base import OPPOSITE, Direction, GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.render import Frame, FrameBuilder

BOARD_SIZE = 20
GAME_SPEED_MS = 100
FOOD_POINTS = 10
CELL = 20

_STEP: dict[Direction, tuple[int, int]] = {
    Direction.up: (0, -1),
    Direction.down: (0, 1),
    Direction.left: (-1, 0),
    Direction.right: (1, 0),
}


class Cell(BaseModel):
    x: int
    y: int

    def key(self) -> tuple[int, int]:
        return (self.x, self.y)


class SnakeState(BaseModel):
    snake: list[Cell] = Field(default_factory=lambda: [Cell(x=10, y=10)])
    food: Cell | None = Field(default_factory=lambda: Cell(x=15, y=15))
    # Requested heading; None until the first direction key.
    direction: Direction | None = None
    # Heading actually used by the last move; reversal is judged against it.
    last_moved: Direction | None = None
    score: int = 0
    crashed: bool = False


def hits_wall(head: Cell) -> bool:
    return not (0 <= head.x < BOARD_SIZE and 0 <= head.y < BOARD_SIZE)


def check_collision(head: Cell, body: list[Cell]) -> bool:
    if hits_wall(head):
        return True
    return any(seg.x == head.x and seg.y == head.y for seg in body)


def generate_food(body: list[Cell], rng: random.Random) -> Cell | None:
    occupied = {seg.key() for seg in body}
    free = [(x, y) for y in range(BOARD_SIZE) for x in range(BOARD_SIZE) if (x, y) not in occupied]
    if not free:
        return None
    x, y = rng.choice(free)
    return Cell(x=x, y=y)


def is_reversal(current: Direction | None, requested: Direction) -> bool:
    return current is not None and OPPOSITE[current] == requested


class SnakeEngine(GameEngine[SnakeState]):
    game_type = GameType.snake
    title = "Snake"
    state_model = SnakeState
    tick_ms = GAME_SPEED_MS

    def new_state(self, *, mode: str, rng: random.Random) -> SnakeState:
        return SnakeState()

    def apply_intent(self, state: SnakeState, intent: Intent, rng: random.Random) -> SnakeState:
        if intent.kind != IntentKind.direction or intent.direction is None:
            return state
        if is_reversal(state.last_moved or state.direction, intent.direction):
            return state
        return state.model_copy(update={"direction": intent.direction})

    def tick(self, state: SnakeState, rng: random.Random) -> SnakeState:
        if state.direction is None or state.crashed or state.food is None:
            return state

        dx, dy = _STEP[state.direction]
        head = Cell(x=state.snake[0].x + dx, y=state.snake[0].y + dy)
        if check_collision(head, state.snake):
            # Body stays as it was; the session ends on this tick.
            return state.model_copy(update={"crashed": True})

        nxt = state.model_copy(deep=True)
        nxt.snake.insert(0, head)
        nxt.last_moved = state.direction
        if state.food is not None and head.key() == state.food.key():
            nxt.score += FOOD_POINTS
            nxt.food = generate_food(nxt.snake, rng)
        else:
            nxt.snake.pop()
        return nxt

    def outcome(self, state: SnakeState) -> Outcome:
        if state.crashed:
            return Outcome.over
        if state.food is None:
            return Outcome.won
        return Outcome.ongoing

    def score(self, state: SnakeState) -> int:
        return state.score

    def render(self, state: SnakeState) -> Frame:
        size = BOARD_SIZE * CELL
        fb = FrameBuilder(game_type=self.game_type.value, width=size, height=size, background="#000000")
        if state.food is not None:
            fb.circle(state.food.x * CELL + CELL / 2, state.food.y * CELL + CELL / 2, CELL / 2, "#ef4444")
        for i, seg in enumerate(state.snake):
            fb.cell(seg.x * CELL, seg.y * CELL, CELL, "#4ade80" if i == 0 else "#16a34a", "O" if i == 0 else "o")
        return fb.build(score=state.score, line=f"length {len(state.snake)}")
