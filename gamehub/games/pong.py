from __future__ import annotations

import random

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.games.geometry import Rect, Vec2, clamp
from gamehub.render import Frame, FrameBuilder

CANVAS_WIDTH = 600
CANVAS_HEIGHT = 300
PADDLE_WIDTH = 10
PADDLE_HEIGHT = 60
BALL_SIZE = 10
TICK_MS = 16

PLAYER_X = 20
AI_X = CANVAS_WIDTH - 30
PADDLE_START_Y = CANVAS_HEIGHT / 2 - PADDLE_HEIGHT / 2
AI_SPEED = 4
AI_DEAD_ZONE = 5
WINNING_SCORE = 5
SPIN = 8


def serve_velocity(rng: random.Random) -> Vec2:
    return Vec2(x=5 * (1 if rng.random() > 0.5 else -1), y=3 * (1 if rng.random() > 0.5 else -1))


def _center() -> Vec2:
    return Vec2(x=CANVAS_WIDTH / 2, y=CANVAS_HEIGHT / 2)


class PongState(BaseModel):
    player: Vec2 = Field(default_factory=lambda: Vec2(x=PLAYER_X, y=PADDLE_START_Y))
    ai: Vec2 = Field(default_factory=lambda: Vec2(x=AI_X, y=PADDLE_START_Y))
    ball: Vec2 = Field(default_factory=_center)
    velocity: Vec2 = Field(default_factory=lambda: Vec2(x=5, y=3))
    player_score: int = 0
    ai_score: int = 0


def paddle_rect(paddle: Vec2) -> Rect:
    return Rect(paddle.x, paddle.y, PADDLE_WIDTH, PADDLE_HEIGHT)


def ball_rect(ball: Vec2) -> Rect:
    return Rect(ball.x, ball.y, BALL_SIZE, BALL_SIZE)


def hit_offset(ball: Vec2, paddle: Vec2) -> float:
    """Where the ball struck the paddle, 0.0 at the top edge and 1.0 at the bottom."""

    return (ball.y - paddle.y) / PADDLE_HEIGHT


def move_ai(ai: Vec2, ball: Vec2) -> Vec2:
    ball_center = ball.y + BALL_SIZE / 2
    paddle_center = ai.y + PADDLE_HEIGHT / 2
    if ball_center < paddle_center - AI_DEAD_ZONE:
        return Vec2(x=ai.x, y=max(0.0, ai.y - AI_SPEED))
    if ball_center > paddle_center + AI_DEAD_ZONE:
        return Vec2(x=ai.x, y=min(CANVAS_HEIGHT - PADDLE_HEIGHT, ai.y + AI_SPEED))
    return ai


class PongEngine(GameEngine[PongState]):
    game_type = GameType.pong
    title = "Pong"
    state_model = PongState
    tick_ms = TICK_MS

    def new_state(self, *, mode: str, rng: random.Random) -> PongState:
        return PongState(velocity=serve_velocity(rng))

    def apply_intent(self, state: PongState, intent: Intent, rng: random.Random) -> PongState:
        if intent.kind != IntentKind.paddle:
            return state
        if intent.y is not None:
            target = intent.y - PADDLE_HEIGHT / 2
        elif intent.dx is not None:
            target = state.player.y + intent.dx
        else:
            return state
        y = clamp(target, 0, CANVAS_HEIGHT - PADDLE_HEIGHT)
        return state.model_copy(update={"player": Vec2(x=state.player.x, y=y)})

    def tick(self, state: PongState, rng: random.Random) -> PongState:
        if self.outcome(state) != Outcome.ongoing:
            return state

        nxt = state.model_copy(deep=True)
        ball = Vec2(x=state.ball.x + state.velocity.x, y=state.ball.y + state.velocity.y)
        vel = Vec2(x=state.velocity.x, y=state.velocity.y)

        if ball.y <= 0 or ball.y >= CANVAS_HEIGHT - BALL_SIZE:
            vel.y = -vel.y
            ball.y = clamp(ball.y, 0, CANVAS_HEIGHT - BALL_SIZE)

        if ball_rect(ball).touches(paddle_rect(state.player)) and ball.x >= state.player.x:
            vel.x = abs(vel.x)
            vel.y = (hit_offset(ball, state.player) - 0.5) * SPIN
        if ball_rect(ball).touches(paddle_rect(state.ai)) and ball.x <= state.ai.x + PADDLE_WIDTH:
            vel.x = -abs(vel.x)
            vel.y = (hit_offset(ball, state.ai) - 0.5) * SPIN

        if ball.x <= 0:
            nxt.ai_score += 1
            ball, vel = _center(), serve_velocity(rng)
        elif ball.x >= CANVAS_WIDTH:
            nxt.player_score += 1
            ball, vel = _center(), serve_velocity(rng)

        nxt.ball = ball
        nxt.velocity = vel
        nxt.ai = move_ai(state.ai, ball)
        return nxt

    def outcome(self, state: PongState) -> Outcome:
        if state.player_score >= WINNING_SCORE:
            return Outcome.won
        if state.ai_score >= WINNING_SCORE:
            return Outcome.over
        return Outcome.ongoing

    def score(self, state: PongState) -> int:
        return state.player_score

    def render(self, state: PongState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, background="#0f172a")
        fb.line(CANVAS_WIDTH / 2, 0, CANVAS_WIDTH / 2, CANVAS_HEIGHT, "#94a3b8")
        fb.rect(state.player.x, state.player.y, PADDLE_WIDTH, PADDLE_HEIGHT, "#22c55e")
        fb.rect(state.ai.x, state.ai.y, PADDLE_WIDTH, PADDLE_HEIGHT, "#ef4444")
        fb.circle(state.ball.x + BALL_SIZE / 2, state.ball.y + BALL_SIZE / 2, BALL_SIZE / 2, "#fbbf24")
        fb.text(CANVAS_WIDTH / 4, 20, str(state.player_score), "#22c55e")
        fb.text(3 * CANVAS_WIDTH / 4, 20, str(state.ai_score), "#ef4444")
        return fb.build(score=state.player_score, line=f"Player {state.player_score} - {state.ai_score} AI")
