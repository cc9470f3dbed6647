from __future__ import annotations

from typing import Literal

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from gamehub.api.models import GameSession, SessionStatus

SessionTrigger = Literal["begin", "pause", "resume", "lose", "win", "restart"]


class SessionFSM(StateMachine):
    """FSM wrapper around GameSession.status.

    idle -> running <-> paused; running -> over | won; any non-idle -> idle.
    Over and won are not final states: restart leaves them.
    """

    idle = State(SessionStatus.idle.value, value=SessionStatus.idle.value, initial=True)
    running = State(SessionStatus.running.value, value=SessionStatus.running.value)
    paused = State(SessionStatus.paused.value, value=SessionStatus.paused.value)
    over = State(SessionStatus.over.value, value=SessionStatus.over.value)
    won = State(SessionStatus.won.value, value=SessionStatus.won.value)

    begin = idle.to(running)
    pause = running.to(paused)
    resume = paused.to(running)
    lose = running.to(over)
    win = running.to(won)
    restart = running.to(idle) | paused.to(idle) | over.to(idle) | won.to(idle)

    def __init__(self, session: GameSession):
        self.session = session
        super().__init__(start_value=session.status.value)

    def sync_status_to_model(self) -> None:
        self.session.status = SessionStatus(str(self.current_state.value))

    def apply(self, event: SessionTrigger) -> None:
        """Fire `event` and write the new status back to the session."""

        try:
            self.send(event)
        except TransitionNotAllowed as e:
            raise ValueError(f"Cannot {event} a session in status '{self.session.status.value}'") from e
        self.sync_status_to_model()
