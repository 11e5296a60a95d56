from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from uuid import UUID

from fastapi import WebSocket

from memory_game.session import GameSession

logger = logging.getLogger(__name__)


class GameWebSocketHub:
    """Pushes `game_updated` notices to the browsers watching a game.

    Every accepted action and every timer tick of a GameController reaches
    `broadcast_game_updated` through the registry's change hook. Those callbacks
    are synchronous, so `notify_nowait` schedules the send on the running loop;
    clients then re-fetch the snapshot over REST. Sockets that fail a send are
    dropped.
    """

    def __init__(self) -> None:
        self._by_game: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def connect(self, game_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_game[game_id].add(websocket)

    async def disconnect(self, game_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_game.get(game_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_game.pop(game_id, None)

    def subscriber_count(self, game_id: str) -> int:
        return len(self._by_game.get(game_id, ()))

    async def broadcast(self, game_id: str, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._by_game.get(game_id, set()))

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                logger.debug("Dropping dead websocket for game %s", game_id, exc_info=True)
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._by_game.get(game_id, set()).discard(ws)

    def notify_nowait(self, game_id: str, payload: dict[str, object]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Driven synchronously (e.g. a virtual clock in tests): nobody to push to.
            return
        task = loop.create_task(self.broadcast(game_id, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


hub = GameWebSocketHub()


def game_updated_payload(game_id: UUID, session: GameSession) -> dict[str, object]:
    return {"type": "game_updated", "game_id": str(game_id), "phase": session.phase.value}


def broadcast_game_updated(game_id: UUID, session: GameSession) -> None:
    hub.notify_nowait(str(game_id), game_updated_payload(game_id, session))
