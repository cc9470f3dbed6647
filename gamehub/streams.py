from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import redis

from gamehub.core.events import SessionEvent

# Keep the per-session log bounded; old entries are trimmed approximately.
STREAM_MAXLEN = 1_000


@dataclass(frozen=True, slots=True)
class EventStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"events:{self.session_id}"


def publish_event(*, r: redis.Redis, event: SessionEvent) -> str:
    """Append a lifecycle event to the session's stream."""

    stream = EventStream(session_id=event.session_id)
    stream_id = r.xadd(stream.key, event.to_fields(), maxlen=STREAM_MAXLEN, approximate=True)
    return cast(str, stream_id)


def read_events(*, r: redis.Redis, session_id: str, count: int = 100) -> list[tuple[str, dict[str, str]]]:
    """Most recent `count` events, oldest first."""

    rows = r.xrevrange(EventStream(session_id=session_id).key, count=count)
    return [(cast(str, entry_id), dict(fields)) for entry_id, fields in reversed(rows)]


def delete_stream(*, r: redis.Redis, session_id: str) -> None:
    r.delete(EventStream(session_id=session_id).key)
