from __future__ import annotations

import math
import random

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.games.geometry import Vec3
from gamehub.render import Frame, FrameBuilder

CANVAS_WIDTH = 400
CANVAS_HEIGHT = 600
BALL_SIZE = 15
PLATFORM_COUNT = 50
PLATFORM_HEIGHT = 20
PLATFORM_SPACING = 80
FIRST_PLATFORM_Y = 200
TOWER_RADIUS = 120
GRAVITY = 0.5
BOUNCE_VELOCITY = -8
DEGREES_PER_PX = 0.5
MIN_GAP = 80
GAP_SPREAD = 40
BALL_START_Y = 100
TICK_MS = 16

COLORS = ("#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FECA57", "#FF9FF3", "#A8E6CF", "#FFD93D")


class Platform(BaseModel):
    y: float
    gap_start: float
    gap_end: float
    color: str
    passed: bool = False


class HelixState(BaseModel):
    ball: Vec3 = Field(default_factory=lambda: ball_position(0.0, BALL_START_Y))
    velocity: float = 0.0
    platforms: list[Platform] = Field(default_factory=list)
    # Degrees; positive spins the tower to the right.
    tower_rotation: float = 0.0
    camera_y: float = 0.0
    score: int = 0


def generate_platforms(rng: random.Random) -> list[Platform]:
    platforms: list[Platform] = []
    for i in range(PLATFORM_COUNT):
        gap_size = MIN_GAP + rng.random() * GAP_SPREAD
        gap_start = rng.random() * (360 - gap_size)
        platforms.append(
            Platform(
                y=i * PLATFORM_SPACING + FIRST_PLATFORM_Y,
                gap_start=gap_start,
                gap_end=gap_start + gap_size,
                color=COLORS[i % len(COLORS)],
            )
        )
    return platforms


def normalize(angle: float) -> float:
    return ((angle % 360) + 360) % 360


def is_in_gap(angle: float, platform: Platform) -> bool:
    a = normalize(angle)
    start, end = normalize(platform.gap_start), normalize(platform.gap_end)
    if end < start:
        return a >= start or a <= end
    return start <= a <= end


def ball_angle(tower_rotation: float) -> float:
    """The ball hangs at the front of the tower; its angle in tower coordinates."""

    return normalize(-tower_rotation)


def ball_position(tower_rotation: float, y: float) -> Vec3:
    rad = math.radians(ball_angle(tower_rotation))
    return Vec3(x=CANVAS_WIDTH / 2 + math.sin(rad) * TOWER_RADIUS, y=y, z=math.cos(rad) * TOWER_RADIUS)


class HelixEngine(GameEngine[HelixState]):
    game_type = GameType.helix_jump
    title = "Helix Jump"
    state_model = HelixState
    tick_ms = TICK_MS

    def new_state(self, *, mode: str, rng: random.Random) -> HelixState:
        return HelixState(platforms=generate_platforms(rng))

    def apply_intent(self, state: HelixState, intent: Intent, rng: random.Random) -> HelixState:
        if intent.kind != IntentKind.rotate or not intent.dx:
            return state
        rotation = normalize(state.tower_rotation + intent.dx * DEGREES_PER_PX)
        return state.model_copy(
            update={"tower_rotation": rotation, "ball": ball_position(rotation, state.ball.y)}
        )

    def tick(self, state: HelixState, rng: random.Random) -> HelixState:
        if self.outcome(state) != Outcome.ongoing:
            return state

        nxt = state.model_copy(deep=True)
        falling = nxt.velocity > 0
        y = nxt.ball.y + nxt.velocity
        nxt.velocity += GRAVITY
        angle = ball_angle(nxt.tower_rotation)

        if falling:
            for platform in nxt.platforms:
                if platform.passed:
                    continue
                top, bottom = platform.y, platform.y + PLATFORM_HEIGHT
                # Swept test over this tick's fall so fast balls cannot tunnel.
                if y + BALL_SIZE < top or state.ball.y > bottom:
                    continue
                if is_in_gap(angle, platform):
                    platform.passed = True
                    nxt.score += 1
                    continue
                y = top - BALL_SIZE
                nxt.velocity = BOUNCE_VELOCITY
                break

        nxt.ball = ball_position(nxt.tower_rotation, y)
        nxt.camera_y = y - CANVAS_HEIGHT / 2
        return nxt

    def outcome(self, state: HelixState) -> Outcome:
        if state.platforms and all(p.passed for p in state.platforms):
            return Outcome.won
        return Outcome.ongoing

    def score(self, state: HelixState) -> int:
        return state.score

    def render(self, state: HelixState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, background="#1e1b4b")
        center = CANVAS_WIDTH / 2
        fb.rect(center - 20, 0, 40, CANVAS_HEIGHT, "#334155")
        for platform in state.platforms:
            sy = platform.y - state.camera_y
            if platform.passed or sy + PLATFORM_HEIGHT < 0 or sy > CANVAS_HEIGHT:
                continue
            fb.rect(center - TOWER_RADIUS, sy, 2 * TOWER_RADIUS, PLATFORM_HEIGHT, platform.color)
            # Front-facing projection of the gap arc.
            xs = [
                center + math.sin(math.radians(a + state.tower_rotation)) * TOWER_RADIUS
                for a in (platform.gap_start, platform.gap_end)
            ]
            fb.rect(min(xs), sy, max(abs(xs[1] - xs[0]), 2), PLATFORM_HEIGHT, "#1e1b4b")
        fb.circle(center, state.ball.y - state.camera_y + BALL_SIZE / 2, BALL_SIZE / 2, "#f8fafc")
        remaining = sum(1 for p in state.platforms if not p.passed)
        return fb.build(score=state.score, line=f"{remaining} platforms to go")
