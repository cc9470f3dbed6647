from __future__ import annotations

import random

from gamehub.games.base import Intent, IntentKind, Outcome
from gamehub.games.geometry import Vec2
from gamehub.games.pong import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    PADDLE_HEIGHT,
    WINNING_SCORE,
    PongEngine,
    PongState,
)


def test_ball_past_left_edge_scores_for_ai_and_resets() -> None:
    engine = PongEngine()
    s = PongState(ball=Vec2(x=2, y=20), velocity=Vec2(x=-5, y=3))
    s.player.y = CANVAS_HEIGHT - PADDLE_HEIGHT

    nxt = engine.tick(s, random.Random(0))
    assert nxt.ai_score == s.ai_score + 1
    assert nxt.player_score == s.player_score
    assert (nxt.ball.x, nxt.ball.y) == (CANVAS_WIDTH / 2, CANVAS_HEIGHT / 2)
    assert abs(nxt.velocity.x) == 5
    assert abs(nxt.velocity.y) == 3


def test_ball_past_right_edge_scores_for_player() -> None:
    engine = PongEngine()
    s = PongState(ball=Vec2(x=CANVAS_WIDTH - 2, y=20), velocity=Vec2(x=5, y=3))
    s.ai.y = CANVAS_HEIGHT - PADDLE_HEIGHT
    nxt = engine.tick(s, random.Random(0))
    assert nxt.player_score == 1
    assert engine.score(nxt) == 1


def test_player_paddle_returns_ball() -> None:
    engine = PongEngine()
    s = PongState(ball=Vec2(x=33, y=145), velocity=Vec2(x=-5, y=0))
    nxt = engine.tick(s, random.Random(0))
    assert nxt.velocity.x > 0
    assert nxt.ai_score == 0


def test_wall_bounce() -> None:
    engine = PongEngine()
    s = PongState(ball=Vec2(x=300, y=1), velocity=Vec2(x=5, y=-3))
    nxt = engine.tick(s, random.Random(0))
    assert nxt.velocity.y == 3
    assert nxt.ball.y == 0


def test_paddle_pointer_and_keys_are_clamped() -> None:
    engine = PongEngine()
    rng = random.Random(0)
    s = PongState()
    assert engine.apply_intent(s, Intent(kind=IntentKind.paddle, y=100), rng).player.y == 100 - PADDLE_HEIGHT / 2
    assert engine.apply_intent(s, Intent(kind=IntentKind.paddle, y=-50), rng).player.y == 0
    top = PongState(player=Vec2(x=20, y=5))
    assert engine.apply_intent(top, Intent(kind=IntentKind.paddle, dx=-20), rng).player.y == 0


def test_first_to_five() -> None:
    engine = PongEngine()
    assert engine.outcome(PongState(player_score=WINNING_SCORE)) == Outcome.won
    assert engine.outcome(PongState(ai_score=WINNING_SCORE)) == Outcome.over
    done = PongState(ai_score=WINNING_SCORE)
    assert engine.tick(done, random.Random(0)) is done
