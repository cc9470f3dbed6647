from __future__ import annotations

import random

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.render import Frame, FrameBuilder

Grid = list[list[int | None]]

CELL = 40
DIGITS = frozenset(range(1, 10))

CLASSIC_PUZZLE: tuple[tuple[int | None, ...], ...] = (
    (5, 3, None, None, 7, None, None, None, None),
    (6, None, None, 1, 9, 5, None, None, None),
    (None, 9, 8, None, None, None, None, 6, None),
    (8, None, None, None, 6, None, None, None, 3),
    (4, None, None, 8, None, 3, None, None, 1),
    (7, None, None, None, 2, None, None, None, 6),
    (None, 6, None, None, None, None, 2, 8, None),
    (None, None, None, 4, 1, 9, None, None, 5),
    (None, None, None, None, 8, None, None, 7, 9),
)


class SudokuState(BaseModel):
    grid: Grid = Field(default_factory=lambda: [list(row) for row in CLASSIC_PUZZLE])
    initial: Grid = Field(default_factory=lambda: [list(row) for row in CLASSIC_PUZZLE])
    is_valid: bool = True
    is_complete: bool = False
    hints_used: int = 0


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def is_valid_number(grid: Grid, row: int, col: int, num: int) -> bool:
    """True if `num` at (row, col) clashes with nothing in its row, column or 3x3 box."""

    for x in range(9):
        if x != col and grid[row][x] == num:
            return False
    for x in range(9):
        if x != row and grid[x][col] == num:
            return False
    box_row, box_col = (row // 3) * 3, (col // 3) * 3
    for r in range(box_row, box_row + 3):
        for c in range(box_col, box_col + 3):
            if (r, c) != (row, col) and grid[r][c] == num:
                return False
    return True


def validate_grid(grid: Grid) -> bool:
    for r in range(9):
        for c in range(9):
            num = grid[r][c]
            if num is not None and not is_valid_number(grid, r, c, num):
                return False
    return True


def is_complete(grid: Grid) -> bool:
    """Every row, column and box holds 1-9 exactly once."""

    for i in range(9):
        if set(grid[i]) != DIGITS:
            return False
        if {grid[r][i] for r in range(9)} != DIGITS:
            return False
    for br in range(0, 9, 3):
        for bc in range(0, 9, 3):
            if {grid[r][c] for r in range(br, br + 3) for c in range(bc, bc + 3)} != DIGITS:
                return False
    return True


def solve(grid: Grid) -> Grid | None:
    """Backtracking solver; returns a solved copy or None if unsolvable."""

    work = copy_grid(grid)
    if not validate_grid(work):
        return None

    empties = [(r, c) for r in range(9) for c in range(9) if work[r][c] is None]

    def _fill(i: int) -> bool:
        if i == len(empties):
            return True
        r, c = empties[i]
        for num in range(1, 10):
            if is_valid_number(work, r, c, num):
                work[r][c] = num
                if _fill(i + 1):
                    return True
        work[r][c] = None
        return False

    return work if _fill(0) else None


def relabel(grid: Grid, rng: random.Random) -> Grid:
    """Apply a random digit permutation; preserves solvability and givens layout."""

    digits = list(range(1, 10))
    rng.shuffle(digits)
    mapping = dict(zip(range(1, 10), digits))
    return [[mapping[v] if v is not None else None for v in row] for row in grid]


class SudokuEngine(GameEngine[SudokuState]):
    game_type = GameType.sudoku
    title = "Sudoku"
    state_model = SudokuState
    modes = ("classic", "variant")

    def new_state(self, *, mode: str, rng: random.Random) -> SudokuState:
        puzzle: Grid = [list(row) for row in CLASSIC_PUZZLE]
        if mode == "variant":
            puzzle = relabel(puzzle, rng)
        return SudokuState(grid=copy_grid(puzzle), initial=copy_grid(puzzle))

    def _set(self, state: SudokuState, row: int, col: int, value: int | None) -> SudokuState:
        if not (0 <= row < 9 and 0 <= col < 9):
            return state
        if state.initial[row][col] is not None or state.is_complete:
            return state
        if value is not None and value not in DIGITS:
            return state

        nxt = state.model_copy(deep=True)
        nxt.grid[row][col] = value
        nxt.is_valid = validate_grid(nxt.grid)
        nxt.is_complete = nxt.is_valid and is_complete(nxt.grid)
        return nxt

    def apply_intent(self, state: SudokuState, intent: Intent, rng: random.Random) -> SudokuState:
        if intent.row is None or intent.col is None:
            return state
        if intent.kind == IntentKind.place:
            return self._set(state, intent.row, intent.col, intent.value)
        if intent.kind == IntentKind.clear:
            return self._set(state, intent.row, intent.col, None)
        if intent.kind == IntentKind.hint:
            solution = solve(state.initial)
            if solution is None or state.grid[intent.row][intent.col] == solution[intent.row][intent.col]:
                return state
            nxt = self._set(state, intent.row, intent.col, solution[intent.row][intent.col])
            if nxt is not state:
                nxt.hints_used += 1
            return nxt
        return state

    def outcome(self, state: SudokuState) -> Outcome:
        return Outcome.won if state.is_complete else Outcome.ongoing

    def score(self, state: SudokuState) -> int:
        filled = sum(
            1
            for r in range(9)
            for c in range(9)
            if state.initial[r][c] is None and state.grid[r][c] is not None
        )
        return max(0, filled - state.hints_used)

    def render(self, state: SudokuState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=9 * CELL, height=9 * CELL, background="#0f172a")
        for r in range(9):
            for c in range(9):
                value = state.grid[r][c]
                fixed = state.initial[r][c] is not None
                color = "#475569" if fixed else "#1e293b"
                fb.cell(c * CELL, r * CELL, CELL, color, str(value) if value is not None else None)
        for i in (3, 6):
            fb.line(i * CELL, 0, i * CELL, 9 * CELL, "#e2e8f0")
            fb.line(0, i * CELL, 9 * CELL, i * CELL, "#e2e8f0")
        if state.is_complete:
            line = "Puzzle Complete!"
        elif not state.is_valid:
            line = "Invalid puzzle state"
        else:
            line = "Fill each row, column, and 3x3 box with numbers 1-9"
        return fb.build(score=self.score(state), line=line)
