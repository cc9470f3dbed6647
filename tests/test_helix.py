from __future__ import annotations

import random

import pytest

from gamehub.games.base import Intent, IntentKind, Outcome
from gamehub.games.helix import (
    BALL_SIZE,
    BOUNCE_VELOCITY,
    CANVAS_WIDTH,
    DEGREES_PER_PX,
    PLATFORM_COUNT,
    TOWER_RADIUS,
    HelixEngine,
    HelixState,
    Platform,
    ball_angle,
    ball_position,
    generate_platforms,
    is_in_gap,
    normalize,
)


def test_normalize_wraps_into_range() -> None:
    assert normalize(-30) == 330
    assert normalize(725) == 5
    assert normalize(0) == 0


def test_gap_membership_handles_wraparound() -> None:
    plain = Platform(y=0, gap_start=10, gap_end=100, color="#fff")
    assert is_in_gap(50, plain)
    assert not is_in_gap(150, plain)

    wrapped = Platform(y=0, gap_start=300, gap_end=400, color="#fff")
    assert is_in_gap(350, wrapped)
    assert is_in_gap(20, wrapped)
    assert not is_in_gap(60, wrapped)


def test_platform_generation() -> None:
    platforms = generate_platforms(random.Random(0))
    assert len(platforms) == PLATFORM_COUNT
    for i, p in enumerate(platforms):
        assert p.y == i * 80 + 200
        assert 80 <= p.gap_end - p.gap_start <= 120
        assert 0 <= p.gap_start and p.gap_end <= 360


def test_ball_position_sits_on_tower_surface() -> None:
    front = ball_position(0.0, 50)
    assert front.x == pytest.approx(CANVAS_WIDTH / 2)
    assert front.z == pytest.approx(TOWER_RADIUS)
    side = ball_position(90.0, 50)
    assert ball_angle(90.0) == 270
    assert side.x == pytest.approx(CANVAS_WIDTH / 2 - TOWER_RADIUS)


def test_drag_rotates_tower() -> None:
    engine = HelixEngine()
    s = engine.apply_intent(HelixState(), Intent(kind=IntentKind.rotate, dx=40), random.Random(0))
    assert s.tower_rotation == 40 * DEGREES_PER_PX


def _falling_onto(platform: Platform) -> HelixState:
    return HelixState(ball=ball_position(0.0, platform.y - BALL_SIZE - 2), velocity=6.0, platforms=[platform])


def test_solid_platform_bounces() -> None:
    engine = HelixEngine()
    # Ball angle at rotation 0 is 0 degrees: outside a 90..200 gap.
    s = _falling_onto(Platform(y=200, gap_start=90, gap_end=200, color="#fff"))
    nxt = engine.tick(s, random.Random(0))
    assert nxt.velocity == BOUNCE_VELOCITY
    assert nxt.ball.y == 200 - BALL_SIZE
    assert nxt.score == 0


def test_gap_passes_and_scores() -> None:
    engine = HelixEngine()
    s = _falling_onto(Platform(y=200, gap_start=330, gap_end=420, color="#fff"))
    nxt = engine.tick(s, random.Random(0))
    assert nxt.platforms[0].passed
    assert nxt.score == 1
    # Every platform passed.
    assert engine.outcome(nxt) == Outcome.won


def test_fast_fall_cannot_tunnel_through() -> None:
    engine = HelixEngine()
    platform = Platform(y=200, gap_start=90, gap_end=200, color="#fff")
    s = HelixState(ball=ball_position(0.0, 170), velocity=60.0, platforms=[platform])
    nxt = engine.tick(s, random.Random(0))
    assert nxt.velocity == BOUNCE_VELOCITY
    assert nxt.ball.y == 200 - BALL_SIZE
