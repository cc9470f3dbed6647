from __future__ import annotations

import random

from gamehub.games.base import Intent, IntentKind, Outcome
from gamehub.games.chess import (
    ChessEngine,
    ChessState,
    Piece,
    all_legal_moves,
    create_initial_board,
    is_valid_move,
)


def _click(row: int, col: int) -> Intent:
    return Intent(kind=IntentKind.select, row=row, col=col)


def _empty_board() -> list[list[Piece | None]]:
    return [[None] * 8 for _ in range(8)]


def test_pawn_moves_from_start_row() -> None:
    board = create_initial_board()
    assert is_valid_move(board, "white", 6, 4, 5, 4)
    assert is_valid_move(board, "white", 6, 4, 4, 4)
    assert not is_valid_move(board, "white", 6, 4, 3, 4)
    # Black pieces cannot be moved on white's turn.
    assert not is_valid_move(board, "white", 1, 4, 2, 4)


def test_pawn_double_step_needs_clear_path() -> None:
    board = create_initial_board()
    board[5][4] = Piece(type="knight", color="black")
    assert not is_valid_move(board, "white", 6, 4, 4, 4)
    # ... but the pawn can capture diagonally onto an occupied square.
    board[5][3] = Piece(type="pawn", color="black")
    assert is_valid_move(board, "white", 6, 4, 5, 3)


def test_sliders_are_blocked() -> None:
    board = create_initial_board()
    assert not is_valid_move(board, "white", 7, 0, 5, 0)
    assert not is_valid_move(board, "white", 7, 2, 5, 4)
    # Knights jump.
    assert is_valid_move(board, "white", 7, 1, 5, 2)


def test_opening_has_twenty_moves() -> None:
    assert len(all_legal_moves(create_initial_board(), "white")) == 20


def test_select_then_move() -> None:
    engine = ChessEngine()
    rng = random.Random(0)
    s = engine.new_state(mode="local", rng=rng)

    s = engine.apply_intent(s, _click(6, 4), rng)
    assert s.selected == (6, 4)
    assert (4, 4) in s.possible_moves

    s = engine.apply_intent(s, _click(4, 4), rng)
    assert s.board[4][4] == Piece(type="pawn", color="white")
    assert s.board[6][4] is None
    assert s.current_player == "black"
    assert s.selected is None


def test_illegal_target_deselects_and_keeps_board() -> None:
    engine = ChessEngine()
    rng = random.Random(0)
    s = engine.apply_intent(engine.new_state(mode="local", rng=rng), _click(6, 4), rng)
    nxt = engine.apply_intent(s, _click(3, 4), rng)
    assert nxt.selected is None
    assert nxt.board == s.board


def test_computer_mode_replies_for_black() -> None:
    engine = ChessEngine()
    rng = random.Random(5)
    s = engine.new_state(mode="computer", rng=rng)
    s = engine.apply_intent(s, _click(6, 4), rng)
    s = engine.apply_intent(s, _click(4, 4), rng)
    assert s.current_player == "white"
    black_pieces = sum(1 for r in range(8) for c in range(8) if s.board[r][c] and s.board[r][c].color == "black")
    assert black_pieces == 16
    assert s.board[0] != create_initial_board()[0] or s.board[1] != create_initial_board()[1]


def test_king_capture_ends_game() -> None:
    engine = ChessEngine()
    rng = random.Random(0)
    board = _empty_board()
    board[7][0] = Piece(type="king", color="white")
    board[0][4] = Piece(type="king", color="black")
    board[4][4] = Piece(type="rook", color="white")
    s = ChessState(board=board)

    s = engine.apply_intent(s, _click(4, 4), rng)
    assert (0, 4) in s.possible_moves
    s = engine.apply_intent(s, _click(0, 4), rng)
    assert s.king_captured == "black"
    assert engine.outcome(s) == Outcome.won
    # Board is frozen once a king falls.
    assert engine.apply_intent(s, _click(7, 0), rng) is s


def test_outcome_and_score() -> None:
    engine = ChessEngine()
    captured_black = ChessState(king_captured="black", captured=[Piece(type="king", color="black")])
    assert engine.outcome(captured_black) == Outcome.won
    assert engine.score(captured_black) == 1

    lost = ChessState(mode="computer", king_captured="white")
    assert engine.outcome(lost) == Outcome.over
    assert not engine.awaiting_human(ChessState(mode="computer", current_player="black"))
