#!/usr/bin/env python3
"""
Tests for the maze game JSON API
"""

import pytest

from maze_server import GameStore, create_app
from maze_state import Cell


@pytest.fixture
def client():
    app = create_app({"seed": 3})
    app.config["TESTING"] = True
    return app.test_client()


def _create(client, **body):
    response = client.post("/api/maze", json=body)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def _open_direction(maze):
    grid = maze["grid"]
    return "right" if grid[0][1] != Cell.WALL else "down"


def test_create_maze(client):
    data = _create(client, width=4, height=3)
    maze = data["maze"]
    assert data["maze_id"].startswith("maze_")
    assert (maze["height"], maze["width"]) == (5, 7)
    assert maze["cursor"] == [0, 0]
    assert maze["goal"] == [4, 6]
    assert maze["grid"][0][0] == Cell.CURSOR
    assert maze["grid"][4][6] == Cell.GOAL
    assert maze["done"] is False
    assert data["completion_time"] is None
    assert "image" not in data


def test_create_maze_default_height(client):
    maze = _create(client, width=10)["maze"]
    assert (maze["half_width"], maze["half_height"]) == (10, 6)


def test_create_maze_with_image(client):
    response = client.post("/api/maze?image=1", json={"width": 3, "height": 3})
    assert response.status_code == 201
    assert response.get_json()["image"].startswith("data:image/png;base64,")


def test_same_seed_same_grid(client):
    first = _create(client, width=6, height=6, seed=17)
    second = _create(client, width=6, height=6, seed=17)
    assert first["maze"]["grid"] == second["maze"]["grid"]
    assert first["maze_id"] != second["maze_id"]


@pytest.mark.parametrize("body", [
    {"width": 0, "height": 3},
    {"width": 3, "height": -2},
    {"width": "wide", "height": 3},
])
def test_invalid_dimension_is_400(client, body):
    response = client.post("/api/maze", json=body)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid dimension"


def test_invalid_mode_and_seed_are_400(client):
    assert client.post("/api/maze", json={"mode": "maze"}).status_code == 400
    assert client.post("/api/maze", json={"seed": "abc"}).status_code == 400
    assert client.post("/api/maze", json=[1, 2]).status_code == 400


def test_get_maze(client):
    created = _create(client, width=3, height=2)
    response = client.get(f"/api/maze/{created['maze_id']}?image=true")
    assert response.status_code == 200
    data = response.get_json()
    assert data["maze"]["grid"] == created["maze"]["grid"]
    assert "image" in data


def test_unknown_session_is_404(client):
    assert client.get("/api/maze/maze_missing").status_code == 404
    response = client.post("/api/maze/maze_missing/move", json={"direction": "up"})
    assert response.status_code == 404
    assert response.get_json()["error"] == "Not found"
    assert client.post("/api/maze/maze_missing/reset").status_code == 404


def test_move(client):
    created = _create(client, width=5, height=5)
    maze_id = created["maze_id"]
    direction = _open_direction(created["maze"])

    data = client.post(f"/api/maze/{maze_id}/move", json={"direction": direction}).get_json()
    assert data["moved"] is True
    assert data["moves"] == 1
    assert data["maze"]["cursor"] != [0, 0]
    assert data["maze"]["grid"][0][0] == Cell.VISITED

    blocked = client.post(f"/api/maze/{maze_id}/move", json={"direction": "up"}).get_json()
    if data["maze"]["cursor"][0] == 0:
        assert blocked["moved"] is False
        assert blocked["maze"]["grid"] == data["maze"]["grid"]


def test_move_bad_direction_is_400(client):
    maze_id = _create(client, width=3, height=3)["maze_id"]
    assert client.post(f"/api/maze/{maze_id}/move", json={"direction": "sideways"}).status_code == 400
    assert client.post(f"/api/maze/{maze_id}/move", json={}).status_code == 400


def test_solving_latches_completion(client):
    maze_id = _create(client, width=2, height=1)["maze_id"]
    client.post(f"/api/maze/{maze_id}/move", json={"direction": "right"})
    data = client.post(f"/api/maze/{maze_id}/move", json={"direction": "right"}).get_json()
    assert data["maze"]["done"] is True
    assert data["completion_time"] is not None

    after = client.post(f"/api/maze/{maze_id}/move", json={"direction": "left"}).get_json()
    assert after["moved"] is False
    assert after["completion_time"] == data["completion_time"]


def test_reset_keeps_size_and_clears_timer(client):
    maze_id = _create(client, width=2, height=1)["maze_id"]
    client.post(f"/api/maze/{maze_id}/move", json={"direction": "right"})
    client.post(f"/api/maze/{maze_id}/move", json={"direction": "right"})

    data = client.post(f"/api/maze/{maze_id}/reset").get_json()
    assert (data["maze"]["height"], data["maze"]["width"]) == (1, 3)
    assert data["maze"]["cursor"] == [0, 0]
    assert data["maze"]["done"] is False
    assert data["completion_time"] is None
    assert data["moves"] == 0


def test_health_and_metrics(client):
    _create(client, width=3, height=3)
    health = client.get("/api/health").get_json()
    assert health["status"] == "healthy"
    assert health["active_sessions"] >= 1

    metrics = client.get("/admin/metrics").get_json()
    assert "maze_generation" in metrics


@pytest.mark.parametrize("body", [
    {"width": 700, "height": 700},
    {"width": 201, "height": 3},
    {"width": 3, "height": 201},
    {"width": 700},
])
def test_oversized_maze_is_400(client, body):
    response = client.post("/api/maze", json=body)
    assert response.status_code == 400
    assert "at most 200" in response.get_json()["message"]


def test_largest_allowed_maze_is_created():
    client = create_app({"seed": 0, "max_dimension": 12}).test_client()
    assert client.post("/api/maze", json={"width": 12, "height": 12}).status_code == 201
    assert client.post("/api/maze", json={"width": 13, "height": 12}).status_code == 400


def test_store_expires_idle_sessions():
    from maze_generator import generate

    store = GameStore(ttl_seconds=60)
    session = store.create(generate(2, 2, seed=0))
    session.created_at -= 120
    session.last_seen -= 120
    assert store.expire() == 1
    assert session.maze_id not in store.sessions


def test_store_keeps_old_but_active_sessions():
    from maze_generator import generate
    from maze_state import Direction

    store = GameStore(ttl_seconds=60)
    session = store.create(generate(2, 2, seed=0))
    session.created_at -= 120
    session.last_seen -= 120
    session.move(Direction.RIGHT)
    assert store.expire() == 0
    assert store.get(session.maze_id) is session

    session.last_seen -= 120
    session.reset()
    assert store.expire() == 0
