from __future__ import annotations

import asyncio
import logging
from uuid import UUID

import redis

from gamehub.actions import dispatch_action, render_session
from gamehub.api.models import GameSession, SessionStatus
from gamehub.lock import SessionBusyError
from gamehub.settings import get_settings
from gamehub.websocket_hub import hub

logger = logging.getLogger(__name__)


async def publish_session(session: GameSession) -> None:
    """Push the session summary and a fresh frame to WebSocket subscribers."""

    sid = str(session.session_id)
    if hub.subscriber_count(sid) == 0:
        return
    await hub.broadcast(
        sid,
        {
            "type": "session_updated",
            "session_id": sid,
            "status": session.status.value,
            "score": session.score,
            "ticks": session.ticks,
        },
    )
    await hub.broadcast(
        sid,
        {"type": "frame", "session_id": sid, "frame": render_session(session).model_dump(mode="json")},
    )


class SessionLoop:
    """Registry of per-session fixed-period tick tasks.

    One task per running arcade session. Tasks are cancelled on pause, terminal
    state, delete and shutdown; input handlers are the only other mutation source.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[GameSession | None]] = {}

    def is_running(self, session_id: str | UUID) -> bool:
        task = self._tasks.get(str(session_id))
        return task is not None and not task.done()

    def ensure_running(self, session: GameSession, *, r: redis.Redis) -> bool:
        """Spawn the tick task for a running timed session. Returns True if a task was started."""

        sid = str(session.session_id)
        if not get_settings().auto_tick or session.tick_ms is None or session.status != SessionStatus.running:
            return False
        if self.is_running(sid):
            return False

        task = asyncio.create_task(self.run(session.session_id, r=r), name=f"tick:{sid}")
        self._tasks[sid] = task

        def _forget(done: asyncio.Task[GameSession | None]) -> None:
            if self._tasks.get(sid) is done:
                self._tasks.pop(sid, None)

        task.add_done_callback(_forget)
        logger.info("tick loop started session_id=%s tick_ms=%s", sid, session.tick_ms)
        return True

    async def stop(self, session_id: str | UUID) -> None:
        sid = str(session_id)
        task = self._tasks.pop(sid, None)
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("tick loop stopped session_id=%s", sid)

    async def stop_all(self) -> None:
        for sid in list(self._tasks):
            await self.stop(sid)

    async def run(
        self,
        session_id: UUID,
        *,
        r: redis.Redis,
        max_ticks: int | None = None,
        max_catchup: int | None = None,
    ) -> GameSession | None:
        """Tick a session at its fixed period until it leaves the running status.

        Scheduling is against the monotonic clock: when a wake-up is late, the
        missed ticks are replayed, at most `max_catchup` at a time; any further
        backlog is dropped rather than accumulated.
        """

        catchup = max_catchup or get_settings().max_catchup_ticks
        loop = asyncio.get_running_loop()
        session: GameSession | None = None
        next_at = loop.time()
        done = 0

        while max_ticks is None or done < max_ticks:
            now = loop.time()
            if now < next_at:
                await asyncio.sleep(next_at - now)
                continue

            if session is None or session.tick_ms is None:
                period = None
            else:
                period = session.tick_ms / 1000
            due = 1 if period is None else 1 + int((now - next_at) // period)
            n = min(due, catchup)
            if max_ticks is not None:
                n = min(n, max_ticks - done)

            try:
                result = dispatch_action(r=r, session_id=session_id, action="tick", n=n)
            except SessionBusyError:
                # An input handler holds the lock; try again next period.
                result = None
            except ValueError as e:
                logger.info("tick loop exiting session_id=%s: %s", session_id, e)
                return session

            if result is not None:
                session = result.session
                done += result.ticks_applied
                await publish_session(session)
                if session.status != SessionStatus.running:
                    logger.info(
                        "tick loop finished session_id=%s status=%s ticks=%s",
                        session_id,
                        session.status.value,
                        session.ticks,
                    )
                    return session

            step = (session.tick_ms if session and session.tick_ms else 16) / 1000
            next_at += max(due, 1) * step

        return session


session_loop = SessionLoop()
