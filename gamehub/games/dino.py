from __future__ import annotations

import random
from typing import Literal

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.games.geometry import Rect, Vec2
from gamehub.render import Frame, FrameBuilder

CANVAS_WIDTH = 600
CANVAS_HEIGHT = 200
DINO_X = 50
DINO_WIDTH = 30
DINO_HEIGHT = 40
GROUND_Y = CANVAS_HEIGHT - 20
GRAVITY = 0.8
JUMP_STRENGTH = -15
GAME_SPEED = 5.0
SPEED_STEP = 0.001
MAX_SPEED = 8.0
CACTUS_CHANCE = 0.7
OBSTACLE_SPACING = 200
TICK_MS = 16


class Obstacle(BaseModel):
    x: float
    y: float
    width: float
    height: float
    type: Literal["cactus", "bird"]

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


class DinoState(BaseModel):
    dino: Vec2 = Field(default_factory=lambda: Vec2(x=DINO_X, y=GROUND_Y - DINO_HEIGHT))
    velocity: float = 0.0
    is_jumping: bool = False
    obstacles: list[Obstacle] = Field(default_factory=list)
    speed: float = GAME_SPEED
    score: int = 0
    crashed: bool = False


def generate_obstacle(rng: random.Random) -> Obstacle:
    if rng.random() < CACTUS_CHANCE:
        return Obstacle(x=CANVAS_WIDTH, y=GROUND_Y - 40, width=20, height=40, type="cactus")
    return Obstacle(x=CANVAS_WIDTH, y=GROUND_Y - 80, width=30, height=20, type="bird")


def dino_rect(dino: Vec2) -> Rect:
    return Rect(dino.x, dino.y, DINO_WIDTH, DINO_HEIGHT)


def check_collision(dino: Vec2, obstacles: list[Obstacle]) -> bool:
    box = dino_rect(dino)
    return any(box.overlaps(o.rect()) for o in obstacles)


class DinoEngine(GameEngine[DinoState]):
    game_type = GameType.dino_run
    title = "Dino Run"
    state_model = DinoState
    tick_ms = TICK_MS

    def new_state(self, *, mode: str, rng: random.Random) -> DinoState:
        return DinoState()

    def apply_intent(self, state: DinoState, intent: Intent, rng: random.Random) -> DinoState:
        # Only from the ground; no double jumps.
        if intent.kind != IntentKind.jump or state.is_jumping or state.crashed:
            return state
        return state.model_copy(update={"velocity": float(JUMP_STRENGTH), "is_jumping": True})

    def tick(self, state: DinoState, rng: random.Random) -> DinoState:
        if state.crashed:
            return state

        nxt = state.model_copy(deep=True)
        nxt.velocity += GRAVITY
        y = nxt.dino.y + nxt.velocity
        if y >= GROUND_Y - DINO_HEIGHT:
            y = GROUND_Y - DINO_HEIGHT
            nxt.velocity = 0.0
            nxt.is_jumping = False
        nxt.dino.y = y

        for obstacle in nxt.obstacles:
            obstacle.x -= nxt.speed
        nxt.obstacles = [o for o in nxt.obstacles if o.x + o.width > 0]
        if not nxt.obstacles or nxt.obstacles[-1].x < CANVAS_WIDTH - OBSTACLE_SPACING:
            nxt.obstacles.append(generate_obstacle(rng))

        nxt.score += 1
        nxt.speed = min(nxt.speed + SPEED_STEP, MAX_SPEED)
        nxt.crashed = check_collision(nxt.dino, nxt.obstacles)
        return nxt

    def outcome(self, state: DinoState) -> Outcome:
        return Outcome.over if state.crashed else Outcome.ongoing

    def score(self, state: DinoState) -> int:
        return state.score

    def render(self, state: DinoState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, background="#87CEEB")
        fb.rect(0, GROUND_Y, CANVAS_WIDTH, CANVAS_HEIGHT - GROUND_Y, "#8B4513")
        for obstacle in state.obstacles:
            color = "#228B22" if obstacle.type == "cactus" else "#8B0000"
            fb.rect(obstacle.x, obstacle.y, obstacle.width, obstacle.height, color)
        fb.rect(state.dino.x, state.dino.y, DINO_WIDTH, DINO_HEIGHT, "#2F4F4F")
        return fb.build(score=state.score, line=f"speed {state.speed:.2f}")
