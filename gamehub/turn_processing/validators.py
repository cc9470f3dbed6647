from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from gamehub.api.models import TERMINAL_STATUSES, GameSession, SessionStatus


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    session_id: str
    action: str


class SessionValidator(ABC):
    """A small, composable validation unit for an incoming session action."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class StatusValidator(SessionValidator):
    """Validates the session status for a given action."""

    allowed_statuses: frozenset[SessionStatus]

    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        if session.status not in self.allowed_statuses:
            allowed = ",".join(sorted(s.value for s in self.allowed_statuses))
            raise ValueError(
                f"Action '{ctx.action}' not allowed in status '{session.status.value}' (allowed: {allowed})"
            )


@dataclass(frozen=True, slots=True)
class FinishedSessionValidator(SessionValidator):
    """Deny almost all actions after the session reached over/won."""

    allow_actions: frozenset[str] = frozenset()

    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        if session.status in TERMINAL_STATUSES and ctx.action not in self.allow_actions:
            raise ValueError(f"Session is {session.status.value}; restart to play again")


@dataclass(frozen=True, slots=True)
class TimedGameValidator(SessionValidator):
    """Only games with a tick timer can be ticked."""

    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        if session.tick_ms is None:
            raise ValueError(f"Game '{session.game_type.value}' is turn-based and has no tick")


@dataclass(frozen=True, slots=True)
class HumanTurnValidator(SessionValidator):
    """In turn-based games with computer seats, only accept input on a human turn."""

    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        from gamehub.turn_processing.turns import assert_is_human_turn

        assert_is_human_turn(session=session)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[SessionValidator, ...]

    def validate(self, *, ctx: ValidationContext, session: GameSession) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, session=session)


DEFAULT_ACTION_PIPELINES: dict[str, ValidatorPipeline] = {
    "start": ValidatorPipeline(
        validators=(
            FinishedSessionValidator(),
            StatusValidator(allowed_statuses=frozenset({SessionStatus.idle})),
        )
    ),
    "pause": ValidatorPipeline(
        validators=(
            FinishedSessionValidator(),
            StatusValidator(allowed_statuses=frozenset({SessionStatus.running})),
        )
    ),
    "resume": ValidatorPipeline(
        validators=(
            FinishedSessionValidator(),
            StatusValidator(allowed_statuses=frozenset({SessionStatus.paused})),
        )
    ),
    "restart": ValidatorPipeline(
        validators=(
            StatusValidator(
                allowed_statuses=frozenset(
                    {SessionStatus.running, SessionStatus.paused, SessionStatus.over, SessionStatus.won}
                )
            ),
        )
    ),
    "input": ValidatorPipeline(
        validators=(
            FinishedSessionValidator(),
            StatusValidator(allowed_statuses=frozenset({SessionStatus.running})),
            HumanTurnValidator(),
        )
    ),
    "tick": ValidatorPipeline(
        validators=(
            FinishedSessionValidator(),
            StatusValidator(allowed_statuses=frozenset({SessionStatus.running})),
            TimedGameValidator(),
        )
    ),
}


def pipeline_for_action(action: str) -> ValidatorPipeline:
    pipe = DEFAULT_ACTION_PIPELINES.get(action)
    if pipe is None:
        raise ValueError(f"Unknown action: {action}")
    return pipe
