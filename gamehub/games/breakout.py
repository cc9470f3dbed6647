from __future__ import annotations

import random

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.games.geometry import Rect, Vec2, clamp
from gamehub.render import Frame, FrameBuilder

CANVAS_WIDTH = 600
CANVAS_HEIGHT = 400
PADDLE_WIDTH = 100
PADDLE_HEIGHT = 15
BALL_SIZE = 10
BLOCK_WIDTH = 50
BLOCK_HEIGHT = 20
BLOCK_GAP = 5
BLOCK_ROWS = 6
BLOCK_COLS = 10
BLOCK_POINTS = 10
START_LIVES = 3
TICK_MS = 16
# Roughly one second of ticks before a lost ball is served again.
SERVE_DELAY_TICKS = 60
SPIN = 8

ROW_COLORS = ("#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FECA57", "#FF9FF3")


class Block(BaseModel):
    x: float
    y: float
    width: float = BLOCK_WIDTH
    height: float = BLOCK_HEIGHT
    destroyed: bool = False
    color: str = ROW_COLORS[0]

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


def create_blocks() -> list[Block]:
    return [
        Block(
            x=col * (BLOCK_WIDTH + BLOCK_GAP) + 30,
            y=row * (BLOCK_HEIGHT + BLOCK_GAP) + 50,
            color=ROW_COLORS[row],
        )
        for row in range(BLOCK_ROWS)
        for col in range(BLOCK_COLS)
    ]


def _serve_position() -> Vec2:
    return Vec2(x=CANVAS_WIDTH / 2, y=CANVAS_HEIGHT - 50)


def serve_velocity(rng: random.Random) -> Vec2:
    return Vec2(x=5 * (1 if rng.random() > 0.5 else -1), y=-5)


class BreakoutState(BaseModel):
    paddle: Vec2 = Field(default_factory=lambda: Vec2(x=CANVAS_WIDTH / 2 - PADDLE_WIDTH / 2, y=CANVAS_HEIGHT - 30))
    ball: Vec2 = Field(default_factory=_serve_position)
    velocity: Vec2 = Field(default_factory=lambda: Vec2(x=5, y=-5))
    blocks: list[Block] = Field(default_factory=create_blocks)
    score: int = 0
    lives: int = START_LIVES
    game_won: bool = False
    # Ticks left before the ball is served again after a life is lost.
    serve_in: int = 0


class BreakoutEngine(GameEngine[BreakoutState]):
    game_type = GameType.breakout
    title = "Breakout"
    state_model = BreakoutState
    tick_ms = TICK_MS

    def new_state(self, *, mode: str, rng: random.Random) -> BreakoutState:
        return BreakoutState(velocity=serve_velocity(rng))

    def apply_intent(self, state: BreakoutState, intent: Intent, rng: random.Random) -> BreakoutState:
        if intent.kind != IntentKind.paddle:
            return state
        if intent.x is not None:
            target = intent.x - PADDLE_WIDTH / 2
        elif intent.dx is not None:
            target = state.paddle.x + intent.dx
        else:
            return state
        x = clamp(target, 0, CANVAS_WIDTH - PADDLE_WIDTH)
        return state.model_copy(update={"paddle": Vec2(x=x, y=state.paddle.y)})

    def tick(self, state: BreakoutState, rng: random.Random) -> BreakoutState:
        if self.outcome(state) != Outcome.ongoing:
            return state

        nxt = state.model_copy(deep=True)
        if nxt.serve_in > 0:
            nxt.serve_in -= 1
            if nxt.serve_in == 0:
                nxt.ball = _serve_position()
                nxt.velocity = serve_velocity(rng)
            return nxt

        ball = Vec2(x=state.ball.x + state.velocity.x, y=state.ball.y + state.velocity.y)
        vel = Vec2(x=state.velocity.x, y=state.velocity.y)

        if ball.x <= 0 or ball.x >= CANVAS_WIDTH - BALL_SIZE:
            vel.x = -vel.x
            ball.x = clamp(ball.x, 0, CANVAS_WIDTH - BALL_SIZE)
        if ball.y <= 0:
            vel.y = -vel.y
            ball.y = 0

        if ball.y >= CANVAS_HEIGHT:
            nxt.lives -= 1
            nxt.ball = _serve_position()
            nxt.velocity = Vec2()
            if nxt.lives > 0:
                nxt.serve_in = SERVE_DELAY_TICKS
            return nxt

        ball_box = Rect(ball.x, ball.y, BALL_SIZE, BALL_SIZE)
        paddle_box = Rect(state.paddle.x, state.paddle.y, PADDLE_WIDTH, PADDLE_HEIGHT)
        if ball_box.touches(paddle_box):
            vel.y = -abs(vel.y)
            vel.x = ((ball.x - state.paddle.x) / PADDLE_WIDTH - 0.5) * SPIN

        hit_block = False
        for block in nxt.blocks:
            if not block.destroyed and ball_box.touches(block.rect()):
                block.destroyed = True
                nxt.score += BLOCK_POINTS
                hit_block = True
        if hit_block:
            vel.y = -vel.y
        nxt.game_won = all(block.destroyed for block in nxt.blocks)

        nxt.ball = ball
        nxt.velocity = vel
        return nxt

    def outcome(self, state: BreakoutState) -> Outcome:
        if state.game_won:
            return Outcome.won
        if state.lives <= 0:
            return Outcome.over
        return Outcome.ongoing

    def score(self, state: BreakoutState) -> int:
        return state.score

    def render(self, state: BreakoutState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, background="#1a1a1a")
        for block in state.blocks:
            if not block.destroyed:
                fb.rect(block.x, block.y, block.width, block.height, block.color)
        fb.rect(state.paddle.x, state.paddle.y, PADDLE_WIDTH, PADDLE_HEIGHT, "#4ECDC4")
        if state.serve_in == 0:
            fb.circle(state.ball.x + BALL_SIZE / 2, state.ball.y + BALL_SIZE / 2, BALL_SIZE / 2, "#FFFFFF")
        remaining = sum(1 for block in state.blocks if not block.destroyed)
        return fb.build(score=state.score, lives=state.lives, line=f"{remaining} blocks left")
