from __future__ import annotations

import random
from typing import Literal

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.render import Frame, FrameBuilder

Mark = Literal["X", "O"]
Result = Literal["X", "O", "tie"]

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),  # diagonals
)

CELL = 100


class TicTacToeState(BaseModel):
    board: list[Mark | None] = Field(default_factory=lambda: [None] * 9)
    current_player: Mark = "X"
    mode: Literal["local", "computer"] = "local"
    winner: Result | None = None


def check_winner(board: list[Mark | None]) -> Result | None:
    for a, b, c in WINNING_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    if all(cell is not None for cell in board):
        return "tie"
    return None


def available_moves(board: list[Mark | None]) -> list[int]:
    return [i for i, cell in enumerate(board) if cell is None]


def random_move(board: list[Mark | None], rng: random.Random) -> int | None:
    moves = available_moves(board)
    if not moves:
        return None
    return rng.choice(moves)


class TicTacToeEngine(GameEngine[TicTacToeState]):
    game_type = GameType.tictactoe
    title = "Tic Tac Toe"
    state_model = TicTacToeState
    modes = ("local", "computer")

    def new_state(self, *, mode: str, rng: random.Random) -> TicTacToeState:
        return TicTacToeState(mode=mode)  # type: ignore[arg-type]

    def apply_intent(self, state: TicTacToeState, intent: Intent, rng: random.Random) -> TicTacToeState:
        if intent.kind != IntentKind.select or intent.cell is None:
            return state
        index = intent.cell
        if not 0 <= index < 9 or state.board[index] is not None or state.winner is not None:
            return state

        nxt = state.model_copy(deep=True)
        nxt.board[index] = nxt.current_player
        nxt.winner = check_winner(nxt.board)
        if nxt.winner is not None:
            return nxt

        if nxt.mode == "computer" and nxt.current_player == "X":
            reply = random_move(nxt.board, rng)
            if reply is not None:
                nxt.board[reply] = "O"
            nxt.winner = check_winner(nxt.board)
            nxt.current_player = "X"
        else:
            nxt.current_player = "O" if nxt.current_player == "X" else "X"
        return nxt

    def outcome(self, state: TicTacToeState) -> Outcome:
        if state.winner is None:
            return Outcome.ongoing
        if state.winner == "tie":
            return Outcome.over
        if state.mode == "computer" and state.winner == "O":
            return Outcome.over
        return Outcome.won

    def score(self, state: TicTacToeState) -> int:
        return 1 if state.winner == "X" else 0

    def render(self, state: TicTacToeState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=3 * CELL, height=3 * CELL, background="#1e293b")
        for i, mark in enumerate(state.board):
            color = {"X": "#c084fc", "O": "#fb923c"}.get(mark or "", "#334155")
            fb.cell((i % 3) * CELL, (i // 3) * CELL, CELL, color, mark)
        if state.winner is None:
            line = f"Player {state.current_player}'s turn"
        elif state.winner == "tie":
            line = "Draw!"
        else:
            line = f"{state.winner} Wins!"
        return fb.build(score=self.score(state), line=line)
