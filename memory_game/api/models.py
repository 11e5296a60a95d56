from __future__ import annotations

from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from memory_game.levels import Level
from memory_game.session import GamePhase


class CardState(StrEnum):
    face_down = "face_down"
    face_up = "face_up"
    matched = "matched"
    wrong = "wrong"


class CardView(BaseModel):
    index: int
    state: CardState

    # Only revealed while the card is visible to the player.
    symbol: str | None = None


class OutcomeView(BaseModel):
    won: bool


class GameSnapshot(BaseModel):
    game_id: UUID | None = None
    phase: GamePhase
    selected_level: Level | None = None
    level: Level | None = None

    cards: list[CardView] = Field(default_factory=list)
    matched_pairs: int = 0
    pair_count: int = 0
    # "matched / total", as shown next to the board.
    match_counter: str = "0 / 0"

    preview_remaining: int = 0
    remaining_seconds: int = 0
    timer_display: str = "00:00"

    flipped_indices: list[int] = Field(default_factory=list)
    input_enabled: bool = False

    # When ended.
    outcome: OutcomeView | None = None


class LevelInfo(BaseModel):
    level: Level
    pair_count: int
    time_limit_seconds: int
    preview_seconds: int


class LevelListResponse(BaseModel):
    levels: list[LevelInfo]


class SelectLevelRequest(BaseModel):
    level: Level


class FlipRequest(BaseModel):
    # Out-of-range indices are accepted here and ignored by the controller.
    index: int


class ActionResponse(BaseModel):
    accepted: bool
    game: GameSnapshot


class GameListResponse(BaseModel):
    games: list[GameSnapshot]
