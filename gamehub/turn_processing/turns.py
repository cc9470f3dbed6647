from __future__ import annotations

from gamehub.api.models import GameSession
from gamehub.session_store import engine_for


def current_turn(*, session: GameSession) -> str | None:
    """Human-readable name of whoever acts next in a turn-based game.

    Arcade games have no turns and return None.
    """

    state = session.state
    if "players" in state:
        players = state["players"]
        return players[state.get("current_player", 0)]["name"]
    player = state.get("current_player")
    return str(player) if player is not None else None


def is_human_turn(*, session: GameSession) -> bool:
    engine = engine_for(session)
    return engine.awaiting_human(engine.load(session.state))


def assert_is_human_turn(*, session: GameSession) -> None:
    if not is_human_turn(session=session):
        raise ValueError(f"Not your turn (waiting on {current_turn(session=session)})")
