from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

EventType = Literal[
    "SESSION_CREATED",
    "SESSION_STARTED",
    "SESSION_PAUSED",
    "SESSION_RESUMED",
    "SESSION_RESTARTED",
    "INPUT_APPLIED",
    "SESSION_OVER",
    "SESSION_WON",
    "SCORE_RECORDED",
]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    type: EventType
    session_id: str
    tick: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, session_id: str, tick: int, payload: dict[str, Any] | None = None) -> "SessionEvent":
        return SessionEvent(type=type, session_id=session_id, tick=tick, payload=payload or {}, ts=datetime.now(UTC))

    def to_fields(self) -> dict[str, str]:
        """Flatten to Redis Stream fields (string keys and values only)."""

        fields = {
            "type": self.type,
            "session_id": self.session_id,
            "tick": str(self.tick),
            "ts": self.ts.isoformat(),
        }
        for k, v in self.payload.items():
            fields[str(k)] = "" if v is None else str(v)
        return fields
