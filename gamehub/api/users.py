from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
import redis

from gamehub.api.deps import get_redis
from gamehub.api.models import GameScore, ScoreCreateRequest, User, UserCreateRequest, UserPublic, UserUpdateRequest
from gamehub.portal_context import forget_user, sync_user
from gamehub.user_store import (
    ConflictError,
    create_score,
    create_user,
    delete_user,
    get_game_high_scores,
    get_user,
    get_user_by_email,
    get_user_by_firebase_uid,
    get_user_game_scores,
    get_user_scores,
    parse_limit,
    update_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _public(user: User) -> UserPublic:
    return UserPublic.model_validate(user.model_dump())


def _found(user: User | None) -> UserPublic:
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _public(user)


def _storage_failure(what: str) -> HTTPException:
    logger.exception("storage failure: %s", what)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {what}")


# Users


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user_route(payload: UserCreateRequest, r: redis.Redis = Depends(get_redis)) -> UserPublic:
    try:
        user = create_user(r=r, data=payload.model_dump())
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except redis.RedisError as e:
        raise _storage_failure("create user") from e
    return _public(user)


@router.get("/users/email/{email}", response_model=UserPublic)
async def get_user_by_email_route(email: str, r: redis.Redis = Depends(get_redis)) -> UserPublic:
    try:
        user = get_user_by_email(r=r, email=email)
    except redis.RedisError as e:
        raise _storage_failure("fetch user") from e
    return _found(user)


@router.get("/users/firebase/{firebase_uid}", response_model=UserPublic)
async def get_user_by_firebase_route(firebase_uid: str, r: redis.Redis = Depends(get_redis)) -> UserPublic:
    try:
        user = get_user_by_firebase_uid(r=r, firebase_uid=firebase_uid)
    except redis.RedisError as e:
        raise _storage_failure("fetch user") from e
    return _found(user)


@router.get("/users/{user_id}", response_model=UserPublic)
async def get_user_route(user_id: int, r: redis.Redis = Depends(get_redis)) -> UserPublic:
    try:
        user = get_user(r=r, user_id=user_id)
    except redis.RedisError as e:
        raise _storage_failure("fetch user") from e
    return _found(user)


@router.put("/users/{user_id}", response_model=UserPublic)
async def update_user_route(user_id: int, payload: UserUpdateRequest, r: redis.Redis = Depends(get_redis)) -> UserPublic:
    try:
        user = update_user(r=r, user_id=user_id, changes=payload.model_dump(exclude_unset=True))
        if user is not None:
            sync_user(r=r, user=user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except redis.RedisError as e:
        raise _storage_failure("update user") from e
    return _found(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_route(user_id: int, r: redis.Redis = Depends(get_redis)) -> Response:
    try:
        deleted = delete_user(r=r, user_id=user_id)
        if deleted:
            forget_user(r=r, user_id=user_id)
    except redis.RedisError as e:
        raise _storage_failure("delete user") from e
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Scores


@router.post("/scores", response_model=GameScore, status_code=status.HTTP_201_CREATED)
async def create_score_route(payload: ScoreCreateRequest, r: redis.Redis = Depends(get_redis)) -> GameScore:
    try:
        return create_score(r=r, user_id=payload.user_id, game_type=payload.game_type, score=payload.score)
    except redis.RedisError as e:
        raise _storage_failure("create score") from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/scores/user/{user_id}", response_model=list[GameScore])
async def user_scores_route(user_id: int, r: redis.Redis = Depends(get_redis)) -> list[GameScore]:
    try:
        return get_user_scores(r=r, user_id=user_id)
    except redis.RedisError as e:
        raise _storage_failure("fetch scores") from e


@router.get("/scores/game/{game_type}", response_model=list[GameScore])
async def game_high_scores_route(
    game_type: str,
    limit: str | None = None,
    r: redis.Redis = Depends(get_redis),
) -> list[GameScore]:
    # Taken as a raw string so a bad limit falls back to the default instead of failing validation.
    try:
        return get_game_high_scores(r=r, game_type=game_type, limit=parse_limit(limit))
    except redis.RedisError as e:
        raise _storage_failure("fetch high scores") from e


@router.get("/scores/user/{user_id}/game/{game_type}", response_model=list[GameScore])
async def user_game_scores_route(user_id: int, game_type: str, r: redis.Redis = Depends(get_redis)) -> list[GameScore]:
    try:
        return get_user_game_scores(r=r, user_id=user_id, game_type=game_type)
    except redis.RedisError as e:
        raise _storage_failure("fetch scores") from e
