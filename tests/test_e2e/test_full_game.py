"""End-to-end tests for complete game flows over HTTP."""

import random

import pytest
from fastapi.testclient import TestClient

from bearos.main import app
from bearos.services.table_service import table_service


@pytest.fixture
def client():
    """Client on the real application, without connecting MongoDB or Redis."""
    table_service.tables.clear()
    table_service._locks.clear()
    table_service.set_services(None, None)
    table_service.auto_clear = False
    table_service.rng = random.Random(17)
    # No context manager: the lifespan (MongoDB, Redis) is not started
    yield TestClient(app, raise_server_exceptions=False)
    table_service.rng = None


def _act(client, table_id, state, rng):
    """Perform one random legal action and return the new state."""
    if state["phase"] == "TRICK_COMPLETE":
        response = client.post(f"/tables/{table_id}/clear-trick")
    elif state["phase"] == "BETTING":
        name = state["players"][state["betting_turn"]]["name"]
        moves = client.get(f"/tables/{table_id}/legal-moves", params={"player_name": name}).json()
        response = client.post(
            f"/tables/{table_id}/bets", json={"player_name": name, "bet": rng.choice(moves["bets"])}
        )
    else:
        name = state["players"][state["current_turn"]]["name"]
        moves = client.get(f"/tables/{table_id}/legal-moves", params={"player_name": name}).json()
        card = rng.choice(moves["cards"])
        body = {"player_name": name, "card": card}
        if card == {"suit": "spades", "rank": 7}:
            body["play_mode"] = rng.choice(moves["play_modes"])
        response = client.post(f"/tables/{table_id}/plays", json=body)

    assert response.status_code == 200, response.json()
    return response.json()


class TestFullGame:
    """A whole game played through the public API."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    @pytest.mark.parametrize("num_players", [2, 4])
    def test_short_game_to_the_end(self, client, num_players):
        names = ["ana", "ben", "cy", "dee"][:num_players]
        table_id = client.post("/tables", json={"player_name": names[0]}).json()["table_id"]
        for name in names[1:]:
            assert client.post(f"/tables/{table_id}/join", json={"player_name": name}).status_code == 200

        state = client.post(f"/tables/{table_id}/start").json()
        rng = random.Random(num_players)
        for _ in range(5000):
            if state["phase"] == "GAME_OVER":
                break
            state = _act(client, table_id, state, rng)
            hands = sum(p["hand_size"] for p in state["players"])
            assert hands + state["deck_size"] + len(state["cards_on_table"]) == 36
        else:
            pytest.fail("game did not finish")

        assert state["current_round"] == 18
        assert state["current_turn"] == -1
        assert state["cards_on_table"] == []
        assert all(row["scored"] for row in state["score_table"])

        leaderboard = state["leaderboard"]
        assert len(leaderboard) == num_players
        assert [entry["score"] for entry in leaderboard] == sorted(
            (p["score"] for p in state["players"]), reverse=True
        )

        response = client.post(f"/tables/{table_id}/clear-trick")
        assert response.status_code == 400
        assert response.json()["error"] == "error.gameOver"
