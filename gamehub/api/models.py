from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from gamehub.games.base import GameType
from gamehub.input_adapter import PointerState


class SessionStatus(StrEnum):
    idle = "idle"
    running = "running"
    paused = "paused"
    over = "over"
    won = "won"


TERMINAL_STATUSES = frozenset({SessionStatus.over, SessionStatus.won})


class SessionCreateRequest(BaseModel):
    game_type: GameType
    mode: str | None = None
    user_id: int | None = Field(default=None, ge=1)


class GameSession(BaseModel):
    session_id: UUID
    game_type: GameType
    mode: str
    status: SessionStatus = SessionStatus.idle
    created_at: datetime
    last_updated_at: datetime

    # For reproducibility/debugging. Every engine call draws from Random(f"{seed}:{step}").
    seed: int
    step: int = 0

    ticks: int = 0
    # None for turn-based games.
    tick_ms: int | None = None

    user_id: int | None = None

    # Engine-owned state, serialized by the engine's pydantic model.
    state: dict[str, Any] = Field(default_factory=dict)
    score: int = 0

    # Drag tracking for the input adapter (helix jump).
    pointer: PointerState = Field(default_factory=PointerState)

    # Set once the terminal score has been written to the score store.
    score_recorded: bool = False


class SessionListResponse(BaseModel):
    sessions: list[GameSession]


class CatalogEntryResponse(BaseModel):
    game_type: str
    title: str
    modes: list[str]
    default_mode: str
    tick_ms: int | None


class CatalogResponse(BaseModel):
    games: list[CatalogEntryResponse]


class SessionEventEntry(BaseModel):
    id: str
    fields: dict[str, str]


class SessionEventsResponse(BaseModel):
    session_id: UUID
    events: list[SessionEventEntry]


# Users / scores


class UserCreateRequest(BaseModel):
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str | None = None
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: str | None = None
    avatar: int = Field(default=1, ge=1)
    firebase_uid: str | None = None


class UserUpdateRequest(BaseModel):
    email: str | None = Field(default=None, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str | None = None
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    avatar: int | None = Field(default=None, ge=1)
    firebase_uid: str | None = None


class User(BaseModel):
    """Stored user record. `password` never leaves the server; see `UserPublic`."""

    id: int
    email: str
    password: str | None = None
    first_name: str
    last_name: str
    phone: str | None = None
    avatar: int = 1
    firebase_uid: str | None = None
    created_at: datetime


class UserPublic(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    avatar: int = 1
    firebase_uid: str | None = None
    created_at: datetime


class ScoreCreateRequest(BaseModel):
    user_id: int | None = Field(default=None, ge=1)
    game_type: str = Field(..., min_length=1)
    score: int


class GameScore(BaseModel):
    id: int
    user_id: int | None = None
    game_type: str
    score: int
    created_at: datetime


# Portal context


Theme = Literal["light", "dark"]


class PortalContextResponse(BaseModel):
    theme: Theme
    authenticated: bool
    user_id: int | None = None
    profile: UserPublic | None = None
    require_auth: bool = False


class ThemeRequest(BaseModel):
    theme: Theme


class LoginRequest(BaseModel):
    user_id: int = Field(..., ge=1)


class AvatarRequest(BaseModel):
    avatar: int = Field(..., ge=1)
