from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import redis

from gamehub.api.models import GameScore, User

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "gamehub:user:"  # + {id}
USER_ID_SEQ_KEY = "gamehub:users:next_id"
USER_EMAIL_INDEX_PREFIX = "gamehub:user_email:"  # + {casefolded email} -> id
USER_FIREBASE_INDEX_PREFIX = "gamehub:user_firebase:"  # + {uid} -> id

SCORE_KEY_PREFIX = "gamehub:score:"  # + {id}
SCORE_ID_SEQ_KEY = "gamehub:scores:next_id"
USER_SCORES_PREFIX = "gamehub:user_scores:"  # + {user_id} -> set of score ids
GAME_SCORES_PREFIX = "gamehub:game_scores:"  # + {game_type} -> set of score ids

DEFAULT_HIGH_SCORE_LIMIT = 10

_REQUIRED_USER_FIELDS = frozenset({"email", "first_name", "last_name", "avatar"})


class ConflictError(ValueError):
    """A unique field (email, firebase uid) is already taken by another user."""


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _user_key(user_id: int) -> str:
    return f"{USER_KEY_PREFIX}{user_id}"


def _email_key(email: str) -> str:
    return f"{USER_EMAIL_INDEX_PREFIX}{email.casefold()}"


def _firebase_key(uid: str) -> str:
    return f"{USER_FIREBASE_INDEX_PREFIX}{uid}"


def _score_key(score_id: int) -> str:
    return f"{SCORE_KEY_PREFIX}{score_id}"


def _lookup(r: redis.Redis, index_key: str) -> User | None:
    raw_id = r.get(index_key)
    if not raw_id:
        return None
    return get_user(r=r, user_id=int(raw_id))


def _ensure_unique(r: redis.Redis, *, email: str | None, firebase_uid: str | None, user_id: int | None = None) -> None:
    if email is not None:
        owner = r.get(_email_key(email))
        if owner and int(owner) != user_id:
            raise ConflictError("Email already registered")
    if firebase_uid is not None:
        owner = r.get(_firebase_key(firebase_uid))
        if owner and int(owner) != user_id:
            raise ConflictError("Firebase UID already registered")


# Users


def get_user(*, r: redis.Redis, user_id: int) -> User | None:
    raw = r.get(_user_key(user_id))
    if not raw:
        return None
    return User.model_validate_json(raw)


def get_user_by_email(*, r: redis.Redis, email: str) -> User | None:
    return _lookup(r, _email_key(email))


def get_user_by_firebase_uid(*, r: redis.Redis, firebase_uid: str) -> User | None:
    return _lookup(r, _firebase_key(firebase_uid))


def create_user(*, r: redis.Redis, data: dict[str, Any]) -> User:
    _ensure_unique(r, email=data["email"], firebase_uid=data.get("firebase_uid"))

    user_id = int(r.incr(USER_ID_SEQ_KEY))
    user = User(id=user_id, created_at=_now(), **data)
    r.set(_user_key(user_id), user.model_dump_json())
    r.set(_email_key(user.email), str(user_id))
    if user.firebase_uid:
        r.set(_firebase_key(user.firebase_uid), str(user_id))

    logger.info("user created user_id=%s", user_id)
    return user


def update_user(*, r: redis.Redis, user_id: int, changes: dict[str, Any]) -> User | None:
    """Partial update; only keys present in `changes` are touched."""

    user = get_user(r=r, user_id=user_id)
    if user is None:
        return None
    # Required fields cannot be nulled out.
    changes = {k: v for k, v in changes.items() if v is not None or k not in _REQUIRED_USER_FIELDS}
    _ensure_unique(r, email=changes.get("email"), firebase_uid=changes.get("firebase_uid"), user_id=user_id)

    updated = user.model_copy(update=changes)
    if updated.email.casefold() != user.email.casefold():
        r.delete(_email_key(user.email))
    r.set(_email_key(updated.email), str(user_id))
    if user.firebase_uid and updated.firebase_uid != user.firebase_uid:
        r.delete(_firebase_key(user.firebase_uid))
    if updated.firebase_uid:
        r.set(_firebase_key(updated.firebase_uid), str(user_id))

    r.set(_user_key(user_id), updated.model_dump_json())
    return updated


def delete_user(*, r: redis.Redis, user_id: int) -> bool:
    """Delete a user and cascade to their scores."""

    user = get_user(r=r, user_id=user_id)
    if user is None:
        return False

    score_ids = r.smembers(f"{USER_SCORES_PREFIX}{user_id}")
    for sid in score_ids:
        score = _get_score(r, int(sid))
        if score is not None:
            r.srem(f"{GAME_SCORES_PREFIX}{score.game_type}", sid)
        r.delete(_score_key(int(sid)))
    r.delete(f"{USER_SCORES_PREFIX}{user_id}")

    r.delete(_email_key(user.email))
    if user.firebase_uid:
        r.delete(_firebase_key(user.firebase_uid))
    r.delete(_user_key(user_id))

    logger.info("user deleted user_id=%s scores_removed=%s", user_id, len(score_ids))
    return True


# Scores


def _get_score(r: redis.Redis, score_id: int) -> GameScore | None:
    raw = r.get(_score_key(score_id))
    if not raw:
        return None
    return GameScore.model_validate_json(raw)


def _load_scores(r: redis.Redis, index_key: str) -> list[GameScore]:
    out: list[GameScore] = []
    for sid in r.smembers(index_key):
        score = _get_score(r, int(sid))
        if score is not None:
            out.append(score)
    return out


def _by_score_desc(scores: list[GameScore]) -> list[GameScore]:
    # Ties go to whoever got there first.
    return sorted(scores, key=lambda s: (-s.score, s.created_at, s.id))


def create_score(*, r: redis.Redis, user_id: int | None, game_type: str, score: int) -> GameScore:
    if user_id is not None and get_user(r=r, user_id=user_id) is None:
        raise ValueError("User not found")

    score_id = int(r.incr(SCORE_ID_SEQ_KEY))
    entry = GameScore(id=score_id, user_id=user_id, game_type=game_type, score=score, created_at=_now())
    r.set(_score_key(score_id), entry.model_dump_json())
    r.sadd(f"{GAME_SCORES_PREFIX}{game_type}", str(score_id))
    if user_id is not None:
        r.sadd(f"{USER_SCORES_PREFIX}{user_id}", str(score_id))
    return entry


def get_user_scores(*, r: redis.Redis, user_id: int) -> list[GameScore]:
    """All of a user's scores, newest first."""

    scores = _load_scores(r, f"{USER_SCORES_PREFIX}{user_id}")
    return sorted(scores, key=lambda s: (s.created_at, s.id), reverse=True)


def get_game_high_scores(*, r: redis.Redis, game_type: str, limit: int = DEFAULT_HIGH_SCORE_LIMIT) -> list[GameScore]:
    return _by_score_desc(_load_scores(r, f"{GAME_SCORES_PREFIX}{game_type}"))[:limit]


def get_user_game_scores(*, r: redis.Redis, user_id: int, game_type: str) -> list[GameScore]:
    scores = [s for s in _load_scores(r, f"{USER_SCORES_PREFIX}{user_id}") if s.game_type == game_type]
    return _by_score_desc(scores)


def parse_limit(raw: str | None) -> int:
    """Query-string limit; anything missing, non-numeric or non-positive falls back to the default."""

    if raw is None:
        return DEFAULT_HIGH_SCORE_LIMIT
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_HIGH_SCORE_LIMIT
    return value if value > 0 else DEFAULT_HIGH_SCORE_LIMIT
