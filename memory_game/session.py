from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from memory_game.cards import Card
from memory_game.levels import Level, LevelConfig, get_level_config
from memory_game.scheduler import TimerHandle


class GamePhase(StrEnum):
    setup = "setup"
    preview = "preview"
    playing = "playing"
    ended = "ended"


class TimerName(StrEnum):
    preview_countdown = "preview_countdown"
    main_countdown = "main_countdown"
    evaluate = "evaluate"
    mismatch_hide = "mismatch_hide"
    unlock = "unlock"
    win = "win"


@dataclass(frozen=True, slots=True)
class Outcome:
    won: bool


@dataclass(slots=True)
class GameSession:
    """All mutable state of one game, owned by a single GameController."""

    phase: GamePhase = GamePhase.setup

    # Chosen in Setup; committed to `level` on start.
    selected_level: Level | None = None
    level: Level | None = None

    cards: list[Card] = field(default_factory=list)
    matched_pairs: int = 0
    remaining_seconds: int = 0
    preview_remaining: int = 0
    flipped_indices: list[int] = field(default_factory=list)
    input_enabled: bool = False
    outcome: Outcome | None = None

    # Bumped on start/reset; timer callbacks from an older epoch are ignored.
    epoch: int = 0
    timers: dict[TimerName, TimerHandle] = field(default_factory=dict)

    @property
    def config(self) -> LevelConfig | None:
        return get_level_config(self.level) if self.level is not None else None

    @property
    def pair_count(self) -> int:
        cfg = self.config
        return cfg.pair_count if cfg is not None else 0

    @property
    def active_timers(self) -> list[TimerName]:
        return [name for name, handle in self.timers.items() if not handle.cancelled]

    def cancel_timer(self, name: TimerName) -> None:
        handle = self.timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def cancel_all_timers(self) -> None:
        for handle in self.timers.values():
            handle.cancel()
        self.timers.clear()

    def clear(self) -> None:
        """Back to a blank Setup session. Timers must already be cancelled."""

        self.phase = GamePhase.setup
        self.selected_level = None
        self.level = None
        self.cards = []
        self.matched_pairs = 0
        self.remaining_seconds = 0
        self.preview_remaining = 0
        self.flipped_indices = []
        self.input_enabled = False
        self.outcome = None
        self.epoch += 1


def format_clock(seconds: int) -> str:
    """Render a countdown as mm:ss."""

    seconds = max(0, seconds)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"
