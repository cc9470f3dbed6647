from __future__ import annotations

import pytest

from gamehub.render import FrameBuilder, apply_status_overlay, frame_to_ascii
from gamehub.settings import load_dotenv_if_present, settings_from_env


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GAMEHUB_AUTO_TICK", "off")
    monkeypatch.setenv("GAMEHUB_REQUIRE_AUTH", "Yes")
    monkeypatch.setenv("GAMEHUB_SESSION_TTL_S", "30  # seconds")
    monkeypatch.setenv("GAMEHUB_LOG_LEVEL", "debug")
    monkeypatch.delenv("GAMEHUB_MAX_CATCHUP_TICKS", raising=False)

    settings = settings_from_env()
    assert settings.auto_tick is False
    assert settings.require_auth is True
    assert settings.session_ttl_s == 30
    assert settings.log_level == "DEBUG"
    assert settings.max_catchup_ticks == 5


@pytest.mark.parametrize(
    ("value", "message"),
    [("abc", "Must be an integer"), ("0", "Must be >= 1")],
)
def test_settings_reject_bad_ints(monkeypatch, value: str, message: str) -> None:
    monkeypatch.setenv("GAMEHUB_MAX_CATCHUP_TICKS", value)
    with pytest.raises(ValueError, match=message):
        settings_from_env()


def test_dotenv_loading(monkeypatch, tmp_path) -> None:
    assert load_dotenv_if_present(project_root=tmp_path) is False

    # Register the variable with monkeypatch so whatever dotenv writes is undone.
    monkeypatch.setenv("GAMEHUB_SESSION_TTL_S", "")
    monkeypatch.delenv("GAMEHUB_SESSION_TTL_S")
    (tmp_path / ".env").write_text("GAMEHUB_SESSION_TTL_S=45\n")

    assert load_dotenv_if_present(project_root=tmp_path) is True
    assert settings_from_env().session_ttl_s == 45


def _frame():
    fb = FrameBuilder(game_type="demo", width=600, height=240)
    fb.rect(0, 0, 100, 20, "#fff")
    fb.circle(300, 100, 5, "#f00")
    fb.text(0, 230, "hi")
    return fb.build(score=7, lives=2, line="level 1")


def test_frame_to_ascii() -> None:
    lines = frame_to_ascii(_frame()).splitlines()
    assert len(lines) == 25
    assert lines[0] == "#" * 10
    assert lines[1] == "#" * 10
    assert lines[10][30] == "@"
    assert lines[23] == "hi"
    assert lines[24] == "score=7 lives=2 | level 1"


def test_status_overlay() -> None:
    frame = apply_status_overlay(_frame(), status="over", score=7)
    assert frame.status == "over"
    assert frame.banner is not None
    assert frame.banner.title == "Game Over!"
    assert frame.banner.subtitle == "Final Score: 7"
    assert frame_to_ascii(frame).splitlines()[-1] == "*** Game Over! *** Final Score: 7"

    assert apply_status_overlay(frame, status="won", score=9).banner.title == "You Win!"
    assert apply_status_overlay(frame, status="running", score=9).banner is None
