from __future__ import annotations

from dataclasses import dataclass

from gamehub.games.base import GameEngine, GameType
from gamehub.games.breakout import BreakoutEngine
from gamehub.games.chess import ChessEngine
from gamehub.games.dino import DinoEngine
from gamehub.games.flappy import FlappyEngine
from gamehub.games.helix import HelixEngine
from gamehub.games.ludo import LudoEngine
from gamehub.games.pong import PongEngine
from gamehub.games.snake import SnakeEngine
from gamehub.games.sudoku import SudokuEngine
from gamehub.games.tictactoe import TicTacToeEngine


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    game_type: str
    title: str
    modes: tuple[str, ...]
    default_mode: str
    tick_ms: int | None


# Engines are stateless, so one instance per game is shared process-wide.
ENGINES: dict[GameType, GameEngine] = {
    engine.game_type: engine
    for engine in (
        TicTacToeEngine(),
        SnakeEngine(),
        SudokuEngine(),
        ChessEngine(),
        PongEngine(),
        FlappyEngine(),
        LudoEngine(),
        BreakoutEngine(),
        DinoEngine(),
        HelixEngine(),
    )
}


def get_engine(game_type: str | GameType) -> GameEngine:
    try:
        return ENGINES[GameType(game_type)]
    except ValueError:
        raise ValueError(f"Unknown game type: {game_type}") from None


def catalog() -> list[CatalogEntry]:
    return [
        CatalogEntry(
            game_type=engine.game_type.value,
            title=engine.title,
            modes=engine.modes,
            default_mode=engine.default_mode,
            tick_ms=engine.tick_ms,
        )
        for engine in ENGINES.values()
    ]
