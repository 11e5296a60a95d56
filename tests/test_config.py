from __future__ import annotations

from pathlib import Path

import pytest

from memory_game.config import Timings, get_log_level, get_timings, load_dotenv_if_present


def test_defaults() -> None:
    assert get_timings() == Timings(
        tick_ms=1000,
        evaluate_delay_ms=800,
        win_delay_ms=500,
        mismatch_hide_ms=1000,
        unlock_delay_ms=1200,
    )
    assert get_log_level() == "INFO"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMORY_GAME_TICK_MS", "250")
    monkeypatch.setenv("MEMORY_GAME_UNLOCK_DELAY_MS", "0")
    monkeypatch.setenv("MEMORY_GAME_LOG_LEVEL", "debug")

    timings = get_timings()
    assert timings.tick_ms == 250
    assert timings.unlock_delay_ms == 0
    assert timings.evaluate_delay_ms == 800
    assert get_log_level() == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [("MEMORY_GAME_TICK_MS", "soon"), ("MEMORY_GAME_WIN_DELAY_MS", "-5"), ("MEMORY_GAME_TICK_MS", "0")],
)
def test_bad_values_name_the_variable(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        get_timings()


def test_dotenv_does_not_override_real_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("MEMORY_GAME_TICK_MS=50\nMEMORY_GAME_WIN_DELAY_MS=7\n")
    monkeypatch.setenv("MEMORY_GAME_TICK_MS", "75")
    # Registered as unset so teardown removes what dotenv writes.
    monkeypatch.delenv("MEMORY_GAME_WIN_DELAY_MS", raising=False)

    load_dotenv_if_present(env_file)
    timings = get_timings()
    assert timings.tick_ms == 75
    assert timings.win_delay_ms == 7


def test_missing_dotenv_is_fine(tmp_path: Path) -> None:
    load_dotenv_if_present(tmp_path / ".env")
    assert get_timings() == Timings()


def test_registry_runs_on_the_loaded_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from memory_game.api.deps import create_registry
    from memory_game.config import get_settings

    monkeypatch.setenv("MEMORY_GAME_TICK_MS", "250")
    monkeypatch.setenv("MEMORY_GAME_WIN_DELAY_MS", "40")
    get_settings.cache_clear()

    settings = get_settings()
    assert get_settings() is settings
    assert create_registry().timings is settings.timings
    assert settings.timings.tick_ms == 250
    assert settings.timings.win_delay_ms == 40
