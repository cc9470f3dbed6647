from __future__ import annotations

import time
from contextlib import contextmanager

import redis


class SessionBusyError(ValueError):
    """Another holder is mid-update on this session."""


@contextmanager
def session_lock(*, r: redis.Redis, session_id: str, ttl_ms: int = 5_000):
    """Best-effort per-session lock around load -> mutate -> save.

    Single holder per key; the TTL frees the key if a holder dies mid-update.
    """

    key = f"lock:session:{session_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise SessionBusyError("Session is busy")
    try:
        yield
    finally:
        r.delete(key)
        # small yield to avoid tight contention in tests
        time.sleep(0)
