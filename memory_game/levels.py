from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Level(StrEnum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


@dataclass(frozen=True, slots=True)
class LevelConfig:
    pair_count: int
    time_limit_seconds: int
    preview_seconds: int

    @property
    def card_count(self) -> int:
        return self.pair_count * 2


LEVELS: dict[Level, LevelConfig] = {
    Level.easy: LevelConfig(pair_count=2, time_limit_seconds=15, preview_seconds=3),
    Level.medium: LevelConfig(pair_count=3, time_limit_seconds=45, preview_seconds=5),
    Level.hard: LevelConfig(pair_count=4, time_limit_seconds=60, preview_seconds=7),
}


def get_level_config(level: Level | str) -> LevelConfig:
    level_name = Level(level) if not isinstance(level, Level) else level
    return LEVELS[level_name]


def parse_level(raw: object) -> Level | None:
    """Lenient lookup used by the controller: unknown names map to None instead of raising."""

    if isinstance(raw, Level):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return Level(raw.strip().casefold())
    except ValueError:
        return None
