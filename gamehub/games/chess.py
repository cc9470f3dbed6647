from __future__ import annotations

import random
from typing import Literal

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.render import Frame, FrameBuilder

PieceType = Literal["king", "queen", "rook", "bishop", "knight", "pawn"]
PieceColor = Literal["white", "black"]

CELL = 60
BACK_RANK: tuple[PieceType, ...] = ("rook", "knight", "bishop", "queen", "king", "bishop", "knight", "rook")

PIECE_SYMBOLS: dict[str, dict[str, str]] = {
    "white": {"king": "♔", "queen": "♕", "rook": "♖", "bishop": "♗", "knight": "♘", "pawn": "♙"},
    "black": {"king": "♚", "queen": "♛", "rook": "♜", "bishop": "♝", "knight": "♞", "pawn": "♟"},
}


class Piece(BaseModel):
    type: PieceType
    color: PieceColor


Board = list[list[Piece | None]]
Square = tuple[int, int]


def create_initial_board() -> Board:
    board: Board = [[None] * 8 for _ in range(8)]
    board[0] = [Piece(type=t, color="black") for t in BACK_RANK]
    board[1] = [Piece(type="pawn", color="black") for _ in range(8)]
    board[6] = [Piece(type="pawn", color="white") for _ in range(8)]
    board[7] = [Piece(type=t, color="white") for t in BACK_RANK]
    return board


class ChessState(BaseModel):
    board: Board = Field(default_factory=create_initial_board)
    current_player: PieceColor = "white"
    mode: Literal["local", "computer"] = "local"
    selected: Square | None = None
    possible_moves: list[Square] = Field(default_factory=list)
    captured: list[Piece] = Field(default_factory=list)
    # Color whose king was captured, if any.
    king_captured: PieceColor | None = None


def _path_clear(board: Board, fr: int, fc: int, tr: int, tc: int) -> bool:
    step_r = (tr > fr) - (tr < fr)
    step_c = (tc > fc) - (tc < fc)
    r, c = fr + step_r, fc + step_c
    while (r, c) != (tr, tc):
        if board[r][c] is not None:
            return False
        r, c = r + step_r, c + step_c
    return True


def is_valid_move(board: Board, player: PieceColor, fr: int, fc: int, tr: int, tc: int) -> bool:
    """Simplified movement rules; ignores check, castling, en passant and promotion."""

    if not all(0 <= v < 8 for v in (fr, fc, tr, tc)) or (fr, fc) == (tr, tc):
        return False
    piece = board[fr][fc]
    if piece is None or piece.color != player:
        return False
    target = board[tr][tc]
    if target is not None and target.color == piece.color:
        return False

    row_diff = abs(tr - fr)
    col_diff = abs(tc - fc)

    if piece.type == "pawn":
        direction = -1 if piece.color == "white" else 1
        start_row = 6 if piece.color == "white" else 1
        if col_diff == 0:
            if tr == fr + direction and target is None:
                return True
            if fr == start_row and tr == fr + 2 * direction and target is None:
                return board[fr + direction][fc] is None
            return False
        return col_diff == 1 and tr == fr + direction and target is not None
    if piece.type == "knight":
        return (row_diff, col_diff) in ((2, 1), (1, 2))
    if piece.type == "king":
        return row_diff <= 1 and col_diff <= 1
    if piece.type == "rook":
        straight = row_diff == 0 or col_diff == 0
        return straight and _path_clear(board, fr, fc, tr, tc)
    if piece.type == "bishop":
        return row_diff == col_diff and _path_clear(board, fr, fc, tr, tc)
    if piece.type == "queen":
        line = row_diff == col_diff or row_diff == 0 or col_diff == 0
        return line and _path_clear(board, fr, fc, tr, tc)
    return False


def possible_moves(board: Board, player: PieceColor, row: int, col: int) -> list[Square]:
    return [(tr, tc) for tr in range(8) for tc in range(8) if is_valid_move(board, player, row, col, tr, tc)]


def all_legal_moves(board: Board, player: PieceColor) -> list[tuple[Square, Square]]:
    moves: list[tuple[Square, Square]] = []
    for r in range(8):
        for c in range(8):
            piece = board[r][c]
            if piece is not None and piece.color == player:
                moves.extend(((r, c), to) for to in possible_moves(board, player, r, c))
    return moves


def _other(color: PieceColor) -> PieceColor:
    return "black" if color == "white" else "white"


def _make_move(state: ChessState, src: Square, dst: Square) -> None:
    (fr, fc), (tr, tc) = src, dst
    target = state.board[tr][tc]
    if target is not None:
        state.captured.append(target)
        if target.type == "king":
            state.king_captured = target.color
    state.board[tr][tc] = state.board[fr][fc]
    state.board[fr][fc] = None
    state.current_player = _other(state.current_player)
    state.selected = None
    state.possible_moves = []


class ChessEngine(GameEngine[ChessState]):
    game_type = GameType.chess
    title = "Chess"
    state_model = ChessState
    modes = ("local", "computer")

    def new_state(self, *, mode: str, rng: random.Random) -> ChessState:
        return ChessState(mode=mode)  # type: ignore[arg-type]

    def _select(self, state: ChessState, row: int, col: int) -> ChessState:
        piece = state.board[row][col]
        if piece is None or piece.color != state.current_player:
            if state.selected is None:
                return state
            return state.model_copy(update={"selected": None, "possible_moves": []})
        return state.model_copy(
            update={"selected": (row, col), "possible_moves": possible_moves(state.board, state.current_player, row, col)}
        )

    def apply_intent(self, state: ChessState, intent: Intent, rng: random.Random) -> ChessState:
        if intent.kind != IntentKind.select or intent.row is None or intent.col is None:
            return state
        row, col = intent.row, intent.col
        if not (0 <= row < 8 and 0 <= col < 8) or state.king_captured is not None:
            return state
        if state.mode == "computer" and state.current_player == "black":
            return state

        if state.selected is None:
            return self._select(state, row, col)
        if state.selected == (row, col):
            return state.model_copy(update={"selected": None, "possible_moves": []})

        fr, fc = state.selected
        if not is_valid_move(state.board, state.current_player, fr, fc, row, col):
            # Clicking another own piece re-selects; anything else deselects.
            return self._select(state, row, col)

        nxt = state.model_copy(deep=True)
        _make_move(nxt, (fr, fc), (row, col))
        if nxt.mode == "computer" and nxt.king_captured is None:
            replies = all_legal_moves(nxt.board, "black")
            if replies:
                src, dst = rng.choice(replies)
                _make_move(nxt, src, dst)
            else:
                nxt.current_player = "white"
        return nxt

    def outcome(self, state: ChessState) -> Outcome:
        if state.king_captured is None:
            return Outcome.ongoing
        if state.mode == "computer" and state.king_captured == "white":
            return Outcome.over
        return Outcome.won

    def score(self, state: ChessState) -> int:
        return sum(1 for p in state.captured if p.color == "black")

    def awaiting_human(self, state: ChessState) -> bool:
        return not (state.mode == "computer" and state.current_player == "black")

    def render(self, state: ChessState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=8 * CELL, height=8 * CELL, background="#78350f")
        targets = set(state.possible_moves)
        for r in range(8):
            for c in range(8):
                if state.selected == (r, c):
                    color = "#facc15"
                elif (r, c) in targets:
                    color = "#86efac"
                else:
                    color = "#fef3c7" if (r + c) % 2 == 0 else "#92400e"
                piece = state.board[r][c]
                glyph = PIECE_SYMBOLS[piece.color][piece.type] if piece is not None else None
                fb.cell(c * CELL, r * CELL, CELL, color, glyph)
        if state.king_captured is not None:
            line = f"{_other(state.king_captured).capitalize()} captured the king"
        else:
            line = f"{state.current_player.capitalize()}'s turn"
        return fb.build(score=self.score(state), line=line)
