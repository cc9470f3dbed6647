from __future__ import annotations

import random

from gamehub.games.base import Intent, IntentKind, Outcome
from gamehub.games.tictactoe import WINNING_LINES, TicTacToeEngine, TicTacToeState, check_winner


def _select(cell: int) -> Intent:
    return Intent(kind=IntentKind.select, cell=cell)


def test_check_winner_on_every_triple() -> None:
    for line in WINNING_LINES:
        board = [None] * 9
        for i in line:
            board[i] = "O"
        assert check_winner(board) == "O"


def test_check_winner_tie_only_when_full_without_triple() -> None:
    full_tie = ["X", "O", "X", "X", "O", "O", "O", "X", "X"]
    assert check_winner(full_tie) == "tie"

    almost = list(full_tie)
    almost[8] = None
    assert check_winner(almost) is None

    # A full board that also holds a triple reports the winner, not a tie.
    assert check_winner(["X", "X", "X", "O", "O", "X", "O", "X", "O"]) == "X"


def test_local_mode_alternates_and_rejects_occupied_cell() -> None:
    engine = TicTacToeEngine()
    rng = random.Random(0)
    s0 = engine.new_state(mode="local", rng=rng)

    s1 = engine.apply_intent(s0, _select(4), rng)
    assert s1.board[4] == "X"
    assert s1.current_player == "O"
    assert s0.board[4] is None

    same = engine.apply_intent(s1, _select(4), rng)
    assert same is s1


def test_computer_reply_keeps_x_to_move() -> None:
    engine = TicTacToeEngine()
    rng = random.Random(1)
    s = engine.apply_intent(engine.new_state(mode="computer", rng=rng), _select(0), rng)
    assert s.board.count("X") == 1
    assert s.board.count("O") == 1
    assert s.current_player == "X"


def test_outcomes() -> None:
    engine = TicTacToeEngine()
    x_wins = TicTacToeState(board=["X", "X", "X", "O", "O", None, None, None, None], winner="X")
    assert engine.outcome(x_wins) == Outcome.won
    assert engine.score(x_wins) == 1

    cpu_wins = TicTacToeState(mode="computer", winner="O")
    assert engine.outcome(cpu_wins) == Outcome.over

    assert engine.outcome(TicTacToeState(winner="tie")) == Outcome.over
    assert engine.outcome(TicTacToeState()) == Outcome.ongoing


def test_no_moves_after_winner() -> None:
    engine = TicTacToeEngine()
    done = TicTacToeState(board=["X", "X", "X", "O", "O", None, None, None, None], winner="X")
    assert engine.apply_intent(done, _select(8), random.Random(0)) is done
