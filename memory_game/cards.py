from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from memory_game.levels import LEVELS, LevelConfig

T = TypeVar("T")

SPACE_SYMBOLS: tuple[str, ...] = (
    "🚀",
    "🛸",
    "🌌",
    "🪐",
    "⭐",
    "🌟",
    "🌙",
    "☄️",
    "🛰️",
    "👽",
    "🌍",
    "🌕",
)

# Every level must be able to draw its pairs without repeating a symbol.
if len(SPACE_SYMBOLS) < max(cfg.pair_count for cfg in LEVELS.values()):
    raise ValueError("SPACE_SYMBOLS is too small for the largest level")


@dataclass(slots=True)
class Card:
    symbol: str
    matched: bool = False
    face_up: bool = False
    # Transient mismatch marker, cleared when the card turns back face-down.
    wrong: bool = False

    def hide(self) -> None:
        self.face_up = False
        self.wrong = False


def fisher_yates_shuffle(items: Sequence[T], *, rng: random.Random) -> list[T]:
    """Return a shuffled copy of `items` (unbiased, input left untouched)."""

    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def pick_symbols(*, pair_count: int, rng: random.Random, symbols: Sequence[str] = SPACE_SYMBOLS) -> list[str]:
    if pair_count < 1:
        raise ValueError("pair_count must be at least 1")
    if pair_count > len(symbols):
        raise ValueError(f"pair_count {pair_count} exceeds the {len(symbols)} available symbols")
    return fisher_yates_shuffle(symbols, rng=rng)[:pair_count]


def generate_cards(
    config: LevelConfig,
    *,
    rng: random.Random | None = None,
    symbols: Sequence[str] = SPACE_SYMBOLS,
) -> list[Card]:
    """Deal a fresh board for a level.

    Rules:
    - `pair_count` distinct symbols are drawn from a shuffled copy of `symbols`.
    - Each chosen symbol is duplicated once.
    - The combined list is shuffled again to give the final card order.
    """

    rng = rng or random.Random()
    chosen = pick_symbols(pair_count=config.pair_count, rng=rng, symbols=symbols)
    return [Card(symbol=s) for s in fisher_yates_shuffle(chosen + chosen, rng=rng)]
