from __future__ import annotations

import random
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from memory_game.config import Timings
from memory_game.controller import GameController
from memory_game.levels import Level
from memory_game.scheduler import ManualScheduler


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep timing overrides from the developer's shell out of the tests."""

    import os

    for key in list(os.environ):
        if key.startswith("MEMORY_GAME_"):
            monkeypatch.delenv(key, raising=False)

    from memory_game.config import get_settings

    get_settings.cache_clear()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def make_controller(scheduler: ManualScheduler) -> Callable[..., GameController]:
    def _make(*, seed: int = 1234, timings: Timings | None = None) -> GameController:
        return GameController(scheduler=scheduler, timings=timings or Timings(), rng=random.Random(seed))

    return _make


@pytest.fixture()
def controller(make_controller: Callable[..., GameController]) -> GameController:
    return make_controller()


@pytest.fixture()
def playing_easy(controller: GameController, scheduler: ManualScheduler) -> GameController:
    """An easy game that has just left the preview (t=3000ms, 15s on the clock)."""

    assert controller.select_level(Level.easy)
    assert controller.start_game()
    scheduler.advance(3000)
    return controller


def pair_indices(controller: GameController) -> list[tuple[int, int]]:
    """Board positions of each pair, in first-seen order."""

    by_symbol: dict[str, list[int]] = {}
    for idx, card in enumerate(controller.cards):
        by_symbol.setdefault(card.symbol, []).append(idx)
    return [(a, b) for a, b in by_symbol.values()]


def mismatched_indices(controller: GameController) -> tuple[int, int]:
    pairs = pair_indices(controller)
    return pairs[0][0], pairs[1][0]


@pytest.fixture()
def client_and_registry():
    """FastAPI TestClient whose games run on a virtual clock.

    Advance time with `registry.scheduler.advance(ms)`.
    """

    from memory_game.api.deps import get_registry
    from memory_game.main import app
    from memory_game.registry import GameRegistry
    from memory_game.websocket_hub import broadcast_game_updated

    registry = GameRegistry(
        scheduler=ManualScheduler(),
        rng_factory=lambda: random.Random(7),
        on_change=broadcast_game_updated,
    )

    def _override() -> GameRegistry:
        return registry

    app.dependency_overrides[get_registry] = _override
    with TestClient(app) as c:
        yield c, registry
    app.dependency_overrides.clear()
    registry.clear()


@pytest.fixture()
def client(client_and_registry) -> Generator[TestClient, None, None]:
    c, _ = client_and_registry
    yield c
