from __future__ import annotations

import random

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.games.geometry import Rect, Vec2, clamp
from gamehub.render import Frame, FrameBuilder

CANVAS_WIDTH = 400
CANVAS_HEIGHT = 600
BIRD_SIZE = 20
PIPE_WIDTH = 50
PIPE_GAP = 150
GRAVITY = 0.6
JUMP_STRENGTH = -12
PIPE_SPEED = 3
# A new pipe enters once the newest one has travelled this far in.
PIPE_SPACING = 200
TICK_MS = 16


class Pipe(BaseModel):
    x: float
    top_height: float
    passed: bool = False

    def top_rect(self) -> Rect:
        return Rect(self.x, 0, PIPE_WIDTH, self.top_height)

    def bottom_rect(self) -> Rect:
        y = self.top_height + PIPE_GAP
        return Rect(self.x, y, PIPE_WIDTH, CANVAS_HEIGHT - y)


class FlappyState(BaseModel):
    bird: Vec2 = Field(default_factory=lambda: Vec2(x=50, y=CANVAS_HEIGHT / 2))
    velocity: float = 0.0
    pipes: list[Pipe] = Field(default_factory=list)
    score: int = 0
    crashed: bool = False


def generate_pipe(rng: random.Random) -> Pipe:
    top_height = rng.random() * (CANVAS_HEIGHT - PIPE_GAP - 100) + 50
    return Pipe(x=CANVAS_WIDTH, top_height=top_height)


def check_collisions(bird: Vec2, pipes: list[Pipe]) -> bool:
    if bird.y <= 0 or bird.y + BIRD_SIZE >= CANVAS_HEIGHT:
        return True
    box = Rect(bird.x, bird.y, BIRD_SIZE, BIRD_SIZE)
    return any(box.overlaps(p.top_rect()) or box.overlaps(p.bottom_rect()) for p in pipes)


class FlappyEngine(GameEngine[FlappyState]):
    game_type = GameType.flappy_bird
    title = "Flappy Bird"
    state_model = FlappyState
    tick_ms = TICK_MS

    def new_state(self, *, mode: str, rng: random.Random) -> FlappyState:
        return FlappyState()

    def apply_intent(self, state: FlappyState, intent: Intent, rng: random.Random) -> FlappyState:
        if intent.kind != IntentKind.jump or state.crashed:
            return state
        return state.model_copy(update={"velocity": float(JUMP_STRENGTH)})

    def tick(self, state: FlappyState, rng: random.Random) -> FlappyState:
        if state.crashed:
            return state

        nxt = state.model_copy(deep=True)
        nxt.velocity += GRAVITY
        nxt.bird.y += nxt.velocity

        for pipe in nxt.pipes:
            pipe.x -= PIPE_SPEED
        nxt.pipes = [p for p in nxt.pipes if p.x + PIPE_WIDTH > 0]
        if not nxt.pipes or nxt.pipes[-1].x < CANVAS_WIDTH - PIPE_SPACING:
            nxt.pipes.append(generate_pipe(rng))

        for pipe in nxt.pipes:
            if not pipe.passed and pipe.x + PIPE_WIDTH < nxt.bird.x:
                pipe.passed = True
                nxt.score += 1

        if check_collisions(nxt.bird, nxt.pipes):
            nxt.crashed = True
            nxt.bird.y = clamp(nxt.bird.y, 0, CANVAS_HEIGHT - BIRD_SIZE)
        return nxt

    def outcome(self, state: FlappyState) -> Outcome:
        return Outcome.over if state.crashed else Outcome.ongoing

    def score(self, state: FlappyState) -> int:
        return state.score

    def render(self, state: FlappyState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, background="#87CEEB")
        for pipe in state.pipes:
            top, bottom = pipe.top_rect(), pipe.bottom_rect()
            fb.rect(top.x, top.y, top.w, top.h, "#228B22")
            fb.rect(bottom.x, bottom.y, bottom.w, bottom.h, "#228B22")
        fb.circle(state.bird.x + BIRD_SIZE / 2, state.bird.y + BIRD_SIZE / 2, BIRD_SIZE / 2, "#FFD700")
        return fb.build(score=state.score, line="Space or click to flap")
