from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from memory_game.config import Timings
from memory_game.controller import GameController
from memory_game.scheduler import Scheduler
from memory_game.session import GameSession

logger = logging.getLogger(__name__)

ChangeHook = Callable[[UUID, GameSession], None]


class GameNotFoundError(LookupError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class GameEntry:
    game_id: UUID
    controller: GameController
    created_at: datetime


class GameRegistry:
    """In-process store of live games keyed by UUID.

    Games hold live timers, so they only exist for the lifetime of the process.
    All controllers share one scheduler.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        timings: Timings | None = None,
        rng_factory: Callable[[], random.Random] | None = None,
        on_change: ChangeHook | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.timings = timings or Timings()
        self._rng_factory = rng_factory or random.Random
        self._on_change = on_change
        self._games: dict[UUID, GameEntry] = {}

    def create(self) -> GameEntry:
        game_id = uuid4()
        controller = GameController(scheduler=self.scheduler, timings=self.timings, rng=self._rng_factory())
        if self._on_change is not None:
            hook = self._on_change
            controller.subscribe(lambda session: hook(game_id, session))

        entry = GameEntry(game_id=game_id, controller=controller, created_at=_now())
        self._games[game_id] = entry
        logger.info("Created game %s", game_id)
        return entry

    def get(self, game_id: UUID) -> GameController:
        entry = self._games.get(game_id)
        if entry is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        return entry.controller

    def list_games(self) -> list[GameEntry]:
        return sorted(self._games.values(), key=lambda e: e.created_at, reverse=True)

    def remove(self, game_id: UUID) -> None:
        entry = self._games.pop(game_id, None)
        if entry is None:
            raise GameNotFoundError(f"Game {game_id} not found")
        entry.controller.dispose()
        logger.info("Removed game %s", game_id)

    def clear(self) -> None:
        for entry in self._games.values():
            entry.controller.dispose()
        self._games.clear()

    def __len__(self) -> int:
        return len(self._games)
