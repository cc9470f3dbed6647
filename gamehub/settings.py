from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    log_level: str
    # Spawn a server-side tick task when an arcade session starts.
    auto_tick: bool
    # Upper bound on ticks replayed in one wake-up when the loop falls behind.
    max_catchup_ticks: int
    require_auth: bool
    # 0 => sessions never expire.
    session_ttl_s: int


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().casefold() in _TRUTHY


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    # Tolerate trailing comments copied from .env templates.
    cleaned = raw.split("#")[0].strip()
    try:
        value = int(cleaned)
    except ValueError as e:
        raise ValueError(f"Invalid {name} value: {raw!r}. Must be an integer.") from e
    if value < minimum:
        raise ValueError(f"Invalid {name} value: {value}. Must be >= {minimum}.")
    return value


def settings_from_env() -> Settings:
    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        log_level=os.environ.get("GAMEHUB_LOG_LEVEL", "INFO").upper(),
        auto_tick=_env_bool("GAMEHUB_AUTO_TICK", True),
        max_catchup_ticks=_env_int("GAMEHUB_MAX_CATCHUP_TICKS", 5, minimum=1),
        require_auth=_env_bool("GAMEHUB_REQUIRE_AUTH", False),
        session_ttl_s=_env_int("GAMEHUB_SESSION_TTL_S", 0),
    )


def load_dotenv_if_present(*, project_root: Path | None = None) -> bool:
    root = project_root or Path(__file__).resolve().parents[1]
    env_path = root / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv_if_present()
    return settings_from_env()


def reset_settings_for_tests() -> None:
    """Drop the cached settings so the next `get_settings()` re-reads the environment."""

    get_settings.cache_clear()
