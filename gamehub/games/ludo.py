from __future__ import annotations

import random
from typing import Literal

from pydantic import BaseModel, Field

from gamehub.games.base import GameEngine, GameType, Intent, IntentKind, Outcome
from gamehub.render import Frame, FrameBuilder

PlayerColor = Literal["red", "blue", "green", "yellow"]

COLORS: tuple[PlayerColor, ...] = ("red", "blue", "green", "yellow")
COLOR_HEX = {"red": "#ef4444", "blue": "#3b82f6", "green": "#22c55e", "yellow": "#eab308"}
TOKENS_PER_PLAYER = 4
HOME = 0
FINISH = 57
ENTRY_ROLL = 6
BOARD_PX = 400
# Upper bound on consecutive AI rolls resolved after one human action.
MAX_AI_STEPS = 1000
LOG_LIMIT = 20

# Number of human seats per mode; the remaining seats are CPU.
HUMAN_SEATS = {"1p-3cpu": 1, "2p-2cpu": 2, "3p-1cpu": 3, "local": 4}


class Player(BaseModel):
    color: PlayerColor
    is_ai: bool
    tokens: list[int] = Field(default_factory=lambda: [HOME] * TOKENS_PER_PLAYER)
    name: str


class LudoState(BaseModel):
    players: list[Player]
    current_player: int = 0
    # Set after a roll that left at least one legal token move.
    dice_value: int | None = None
    last_roll: int | None = None
    winner: PlayerColor | None = None
    mode: str = "1p-3cpu"
    log: list[str] = Field(default_factory=list)


def create_players(mode: str) -> list[Player]:
    humans = HUMAN_SEATS[mode]
    players: list[Player] = []
    cpu = 0
    for i, color in enumerate(COLORS):
        if i < humans:
            players.append(Player(color=color, is_ai=False, name=f"Player {i + 1}"))
        else:
            cpu += 1
            players.append(Player(color=color, is_ai=True, name=f"CPU {cpu}"))
    return players


def can_move(position: int, roll: int) -> bool:
    if position == HOME:
        return roll == ENTRY_ROLL
    return position < FINISH


def movable_tokens(tokens: list[int], roll: int) -> list[int]:
    return [i for i, pos in enumerate(tokens) if can_move(pos, roll)]


def advance(position: int, roll: int) -> int:
    if position == HOME:
        return 1
    return min(FINISH, position + roll)


def roll_die(rng: random.Random) -> int:
    return rng.randint(1, 6)


def _note(state: LudoState, message: str) -> None:
    state.log.append(message)
    del state.log[:-LOG_LIMIT]


def _next_turn(state: LudoState) -> None:
    state.current_player = (state.current_player + 1) % len(state.players)
    state.dice_value = None


def _move(state: LudoState, token: int, roll: int) -> None:
    player = state.players[state.current_player]
    player.tokens[token] = advance(player.tokens[token], roll)
    _note(state, f"{player.name} moved token {token + 1} to {player.tokens[token]}")
    if all(pos == FINISH for pos in player.tokens):
        state.winner = player.color
        state.dice_value = None
        return
    if roll == ENTRY_ROLL:
        # Same player rolls again.
        state.dice_value = None
    else:
        _next_turn(state)


def _roll(state: LudoState, rng: random.Random) -> list[int]:
    """Roll for the current player; passes the turn when nothing can move."""

    roll = roll_die(rng)
    state.last_roll = roll
    player = state.players[state.current_player]
    legal = movable_tokens(player.tokens, roll)
    if legal:
        state.dice_value = roll
    else:
        _note(state, f"{player.name} rolled {roll} with no legal move")
        _next_turn(state)
    return legal


def _run_ai(state: LudoState, rng: random.Random) -> None:
    steps = 0
    while state.winner is None and state.players[state.current_player].is_ai and steps < MAX_AI_STEPS:
        steps += 1
        legal = _roll(state, rng)
        if legal and state.dice_value is not None:
            _move(state, rng.choice(legal), state.dice_value)


class LudoEngine(GameEngine[LudoState]):
    game_type = GameType.ludo
    title = "Ludo"
    state_model = LudoState
    modes = ("1p-3cpu", "2p-2cpu", "3p-1cpu", "local")

    def new_state(self, *, mode: str, rng: random.Random) -> LudoState:
        return LudoState(players=create_players(mode), mode=mode)

    def apply_intent(self, state: LudoState, intent: Intent, rng: random.Random) -> LudoState:
        if state.winner is not None or not self.awaiting_human(state):
            return state

        if intent.kind == IntentKind.roll:
            if state.dice_value is not None:
                return state
            nxt = state.model_copy(deep=True)
            _roll(nxt, rng)
            _run_ai(nxt, rng)
            return nxt

        if intent.kind == IntentKind.move_token:
            if state.dice_value is None or intent.token is None:
                return state
            tokens = state.players[state.current_player].tokens
            if not 0 <= intent.token < len(tokens) or not can_move(tokens[intent.token], state.dice_value):
                return state
            nxt = state.model_copy(deep=True)
            _move(nxt, intent.token, state.dice_value)
            _run_ai(nxt, rng)
            return nxt

        return state

    def outcome(self, state: LudoState) -> Outcome:
        if state.winner is None:
            return Outcome.ongoing
        winner = next(p for p in state.players if p.color == state.winner)
        return Outcome.over if winner.is_ai else Outcome.won

    def score(self, state: LudoState) -> int:
        return sum(pos == FINISH for p in state.players if not p.is_ai for pos in p.tokens)

    def awaiting_human(self, state: LudoState) -> bool:
        return not state.players[state.current_player].is_ai

    def render(self, state: LudoState) -> Frame:
        fb = FrameBuilder(game_type=self.game_type.value, width=BOARD_PX, height=BOARD_PX, background="#ffffff")
        half = BOARD_PX / 2
        quadrant = BOARD_PX * 2 / 5
        corners = ((0, 0), (BOARD_PX - quadrant, 0), (BOARD_PX - quadrant, BOARD_PX - quadrant), (0, BOARD_PX - quadrant))
        for (cx, cy), player in zip(corners, state.players):
            fb.rect(cx, cy, quadrant, quadrant, COLOR_HEX[player.color], filled=False)
            fb.text(cx + 8, cy + 8, player.name, COLOR_HEX[player.color])
            for i, pos in enumerate(player.tokens):
                if pos == HOME:
                    x, y = cx + 30 + (i % 2) * 40, cy + 40 + (i // 2) * 40
                elif pos == FINISH:
                    x, y = half, half
                else:
                    # Progress along the track, drawn as distance from the centre.
                    x = cx + quadrant / 2 + (half - cx - quadrant / 2) * pos / FINISH
                    y = cy + quadrant / 2 + (half - cy - quadrant / 2) * pos / FINISH
                fb.circle(x, y, 10, COLOR_HEX[player.color])
        current = state.players[state.current_player]
        if state.winner is not None:
            winner = next(p for p in state.players if p.color == state.winner)
            line = f"{winner.name} Wins!"
        elif state.dice_value is not None:
            line = f"{current.name} rolled {state.dice_value}: pick a token"
        else:
            line = f"Current Turn: {current.name}"
        return fb.build(score=self.score(state), line=line)
