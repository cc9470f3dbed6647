from __future__ import annotations

import os
from collections.abc import Generator

import pytest

# Tests drive ticks explicitly; no background tick tasks.
os.environ["GAMEHUB_AUTO_TICK"] = "0"
os.environ.setdefault("GAMEHUB_REQUIRE_AUTH", "0")


@pytest.fixture(scope="session", autouse=True)
def _hermetic_settings() -> None:
    """Re-read settings from the environment set above, ignoring any cached copy."""

    from gamehub.settings import reset_settings_for_tests

    reset_settings_for_tests()


@pytest.fixture()
def redis_client():
    import fakeredis

    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis():
    """Shared fixture for tests that need both a FastAPI TestClient and fakeredis.

    The portal context is initialized against the same fakeredis before the app
    starts, so startup never reaches for a real Redis.
    """

    import fakeredis
    from fastapi.testclient import TestClient

    from gamehub.api.deps import get_redis
    from gamehub.main import app
    from gamehub.portal_context import init_portal, reset_portal_for_tests

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    reset_portal_for_tests()
    init_portal(r=r)
    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
    reset_portal_for_tests()
