from __future__ import annotations

from fastapi.testclient import TestClient

from memory_game.main import app


def test_ws_game_updates_broadcast() -> None:
    with TestClient(app) as client:
        # Create game via REST
        state = client.post("/game").json()
        game_id = state["game_id"]

        with client.websocket_connect(f"/ws/game/{game_id}") as ws:
            # Trigger a state change (level selection)
            res = client.post(f"/game/{game_id}/level", json={"level": "easy"})
            assert res.status_code == 200

            msg = ws.receive_json()
            assert msg["type"] == "game_updated"
            assert msg["game_id"] == game_id
            assert msg["phase"] == "setup"

            client.post(f"/game/{game_id}/start")
            msg = ws.receive_json()
            assert msg["phase"] == "preview"


def test_ignored_action_does_not_broadcast(client: TestClient) -> None:
    from memory_game.websocket_hub import hub

    game_id = client.post("/game").json()["game_id"]
    with client.websocket_connect(f"/ws/game/{game_id}") as ws:
        assert client.post(f"/game/{game_id}/start").json()["accepted"] is False
        client.post(f"/game/{game_id}/level", json={"level": "hard"})
        # The first message is the level selection; the rejected start sent nothing.
        msg = ws.receive_json()
        assert msg["phase"] == "setup"
        assert hub.subscriber_count(game_id) == 1
