from __future__ import annotations

import pytest

from gamehub.portal_context import (
    PORTAL_KEY,
    PortalContext,
    forget_user,
    get_portal,
    init_portal,
    login,
    logout,
    reset_portal_for_tests,
    set_avatar,
    set_theme,
    sync_user,
)
from gamehub.user_store import create_user, get_user, update_user


@pytest.fixture()
def portal_redis(redis_client):
    reset_portal_for_tests()
    init_portal(r=redis_client)
    yield redis_client
    reset_portal_for_tests()


def _user(r) -> int:
    return create_user(r=r, data={"email": "g@example.com", "first_name": "Grace", "last_name": "H", "avatar": 1}).id


def test_get_portal_requires_init() -> None:
    reset_portal_for_tests()
    with pytest.raises(RuntimeError, match="not initialized"):
        get_portal()


def test_defaults_and_persistence(portal_redis) -> None:
    ctx = get_portal()
    assert ctx == PortalContext()
    assert not ctx.authenticated

    dark = set_theme(r=portal_redis, theme="dark")
    assert dark.theme == "dark"
    assert ctx.theme == "light"
    assert get_portal() is dark

    # A fresh process reloads what was persisted.
    reset_portal_for_tests()
    assert init_portal(r=portal_redis).theme == "dark"


def test_login_avatar_logout(portal_redis) -> None:
    user_id = _user(portal_redis)
    with pytest.raises(ValueError, match="Not logged in"):
        set_avatar(r=portal_redis, avatar=4)

    ctx = login(r=portal_redis, user_id=user_id)
    assert ctx.authenticated
    assert ctx.profile is not None and ctx.profile.first_name == "Grace"

    ctx = set_avatar(r=portal_redis, avatar=4)
    assert ctx.profile.avatar == 4
    assert get_user(r=portal_redis, user_id=user_id).avatar == 4

    set_theme(r=portal_redis, theme="dark")
    out = logout(r=portal_redis)
    assert out == PortalContext(theme="dark")
    assert PortalContext.from_json(portal_redis.get(PORTAL_KEY)) == out


def test_login_unknown_user(portal_redis) -> None:
    with pytest.raises(ValueError, match="User not found"):
        login(r=portal_redis, user_id=7)


def test_portal_api(client_and_redis) -> None:
    client, _ = client_and_redis
    body = client.get("/api/portal").json()
    assert body == {"theme": "light", "authenticated": False, "user_id": None, "profile": None, "require_auth": False}

    assert client.put("/api/portal/theme", json={"theme": "dark"}).json()["theme"] == "dark"
    assert client.put("/api/portal/theme", json={"theme": "sepia"}).status_code == 400

    assert client.post("/api/portal/login", json={"user_id": 5}).status_code == 404
    assert client.put("/api/portal/avatar", json={"avatar": 2}).status_code == 422

    user = client.post("/api/users", json={"email": "k@example.com", "first_name": "K", "last_name": "J"}).json()
    logged_in = client.post("/api/portal/login", json={"user_id": user["id"]}).json()
    assert logged_in["authenticated"] is True
    assert logged_in["profile"]["email"] == "k@example.com"
    assert "password" not in logged_in["profile"]

    assert client.put("/api/portal/avatar", json={"avatar": 6}).json()["profile"]["avatar"] == 6

    out = client.post("/api/portal/logout").json()
    assert out["authenticated"] is False
    assert out["theme"] == "dark"


def test_user_changes_follow_into_portal(portal_redis) -> None:
    user_id = _user(portal_redis)
    other = create_user(r=portal_redis, data={"email": "o@example.com", "first_name": "O", "last_name": "P", "avatar": 1})
    login(r=portal_redis, user_id=user_id)

    # Edits to someone else leave the context alone.
    assert sync_user(r=portal_redis, user=other) is get_portal()
    assert forget_user(r=portal_redis, user_id=other.id).user_id == user_id

    renamed = update_user(r=portal_redis, user_id=user_id, changes={"first_name": "Ada"})
    assert sync_user(r=portal_redis, user=renamed).profile.first_name == "Ada"

    out = forget_user(r=portal_redis, user_id=user_id)
    assert not out.authenticated
    assert PortalContext.from_json(portal_redis.get(PORTAL_KEY)) == out


def test_portal_tracks_user_edits_and_deletion(client_and_redis) -> None:
    client, _ = client_and_redis
    user = client.post("/api/users", json={"email": "r@example.com", "first_name": "A", "last_name": "B"}).json()
    client.post("/api/portal/login", json={"user_id": user["id"]})

    client.put(f"/api/users/{user['id']}", json={"first_name": "Renamed"})
    assert client.get("/api/portal").json()["profile"]["first_name"] == "Renamed"

    assert client.delete(f"/api/users/{user['id']}").status_code == 204
    body = client.get("/api/portal").json()
    assert body["authenticated"] is False
    assert body["user_id"] is None
    assert body["profile"] is None

    # With no one logged in, anonymous sessions get no stale owner.
    assert client.post("/sessions", json={"game_type": "snake"}).json()["user_id"] is None
