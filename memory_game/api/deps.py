from __future__ import annotations

from memory_game.config import Settings, get_settings
from memory_game.registry import GameRegistry
from memory_game.scheduler import AsyncioScheduler
from memory_game.websocket_hub import broadcast_game_updated

_registry: GameRegistry | None = None


def create_registry(settings: Settings | None = None) -> GameRegistry:
    settings = settings or get_settings()
    # AsyncioScheduler resolves the running loop per call, so one registry works under any server loop.
    return GameRegistry(scheduler=AsyncioScheduler(), timings=settings.timings, on_change=broadcast_game_updated)


def get_registry() -> GameRegistry:
    global _registry
    if _registry is None:
        _registry = create_registry()
    return _registry


def shutdown_registry() -> None:
    global _registry
    if _registry is not None:
        _registry.clear()
        _registry = None
