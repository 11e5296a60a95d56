from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from memory_game.api.deps import get_registry
from memory_game.api.models import (
    ActionResponse,
    FlipRequest,
    GameListResponse,
    GameSnapshot,
    LevelInfo,
    LevelListResponse,
    SelectLevelRequest,
)
from memory_game.controller import GameController
from memory_game.levels import LEVELS
from memory_game.registry import GameNotFoundError, GameRegistry
from memory_game.websocket_hub import hub

router = APIRouter()


def _require_game(registry: GameRegistry, game_id: UUID) -> GameController:
    try:
        return registry.get(game_id)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found") from e


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: UUID) -> None:
    gid = str(game_id)
    await hub.connect(gid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(gid, websocket)
    except Exception:
        await hub.disconnect(gid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/levels", response_model=LevelListResponse)
async def list_levels_route() -> LevelListResponse:
    return LevelListResponse(
        levels=[
            LevelInfo(
                level=level,
                pair_count=cfg.pair_count,
                time_limit_seconds=cfg.time_limit_seconds,
                preview_seconds=cfg.preview_seconds,
            )
            for level, cfg in LEVELS.items()
        ]
    )


@router.post("/game", response_model=GameSnapshot, status_code=status.HTTP_201_CREATED)
async def create_game_route(registry: GameRegistry = Depends(get_registry)) -> GameSnapshot:
    entry = registry.create()
    return entry.controller.snapshot(game_id=entry.game_id)


@router.get("/game", response_model=GameListResponse)
async def list_games_route(registry: GameRegistry = Depends(get_registry)) -> GameListResponse:
    return GameListResponse(games=[e.controller.snapshot(game_id=e.game_id) for e in registry.list_games()])


@router.get("/game/{game_id}", response_model=GameSnapshot)
async def get_game_route(game_id: UUID, registry: GameRegistry = Depends(get_registry)) -> GameSnapshot:
    return _require_game(registry, game_id).snapshot(game_id=game_id)


@router.delete("/game/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game_route(game_id: UUID, registry: GameRegistry = Depends(get_registry)) -> Response:
    try:
        registry.remove(game_id)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found") from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/game/{game_id}/level", response_model=ActionResponse)
async def select_level_route(
    game_id: UUID,
    payload: SelectLevelRequest,
    registry: GameRegistry = Depends(get_registry),
) -> ActionResponse:
    controller = _require_game(registry, game_id)
    accepted = controller.select_level(payload.level)
    return ActionResponse(accepted=accepted, game=controller.snapshot(game_id=game_id))


@router.post("/game/{game_id}/start", response_model=ActionResponse)
async def start_game_route(game_id: UUID, registry: GameRegistry = Depends(get_registry)) -> ActionResponse:
    controller = _require_game(registry, game_id)
    accepted = controller.start_game()
    return ActionResponse(accepted=accepted, game=controller.snapshot(game_id=game_id))


@router.post("/game/{game_id}/flip", response_model=ActionResponse)
async def flip_card_route(
    game_id: UUID,
    payload: FlipRequest,
    registry: GameRegistry = Depends(get_registry),
) -> ActionResponse:
    controller = _require_game(registry, game_id)
    accepted = controller.flip_card(payload.index)
    return ActionResponse(accepted=accepted, game=controller.snapshot(game_id=game_id))


@router.post("/game/{game_id}/reset", response_model=ActionResponse)
async def reset_game_route(game_id: UUID, registry: GameRegistry = Depends(get_registry)) -> ActionResponse:
    controller = _require_game(registry, game_id)
    accepted = controller.reset_game()
    return ActionResponse(accepted=accepted, game=controller.snapshot(game_id=game_id))
