from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_PREFIX = "MEMORY_GAME_"


@dataclass(frozen=True, slots=True)
class Timings:
    # Countdown granularity for both preview and main timers.
    tick_ms: int = 1000
    evaluate_delay_ms: int = 800
    win_delay_ms: int = 500
    mismatch_hide_ms: int = 1000
    unlock_delay_ms: int = 1200


@dataclass(frozen=True, slots=True)
class Settings:
    timings: Timings
    log_level: str = "INFO"


def load_dotenv_if_present(path: Path | None = None) -> None:
    """Load a local `.env` without overriding variables already set in the environment."""

    env_path = path or Path.cwd() / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


def _env_ms(name: str, default: int) -> int:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer number of milliseconds, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= 0")
    return value


def get_timings() -> Timings:
    defaults = Timings()
    tick_ms = _env_ms("TICK_MS", defaults.tick_ms)
    if tick_ms == 0:
        raise ValueError(f"{ENV_PREFIX}TICK_MS must be > 0")
    return Timings(
        tick_ms=tick_ms,
        evaluate_delay_ms=_env_ms("EVALUATE_DELAY_MS", defaults.evaluate_delay_ms),
        win_delay_ms=_env_ms("WIN_DELAY_MS", defaults.win_delay_ms),
        mismatch_hide_ms=_env_ms("MISMATCH_HIDE_MS", defaults.mismatch_hide_ms),
        unlock_delay_ms=_env_ms("UNLOCK_DELAY_MS", defaults.unlock_delay_ms),
    )


def get_log_level() -> str:
    return os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()


def load_settings() -> Settings:
    load_dotenv_if_present()
    return Settings(timings=get_timings(), log_level=get_log_level())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded once and shared by the app and the game registry."""

    return load_settings()
