"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

import time
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from pogapp import api
from pogapp.api import app


@pytest.fixture(autouse=True)
def isolated_sessions():
    """Each test starts with no sessions."""
    api._sessions.clear()
    yield
    api._sessions.clear()


@pytest.fixture
def client():
    # Context manager keeps one event loop alive so deferred AI turns can run between requests
    with TestClient(app) as c:
        yield c


def _create(client, **body) -> tuple[str, dict]:
    resp = client.post("/sessions", json=body)
    assert resp.status_code == 200
    data = resp.json()
    return data["session_id"], data


def _wait_for_player(client, session_id: str, timeout: float = 5.0) -> dict:
    """Poll until the AI has thrown (or the timeout passes)."""
    deadline = time.monotonic() + timeout
    while True:
        snap = client.get(f"/sessions/{session_id}").json()["snapshot"]
        if not snap["awaiting_ai"] or time.monotonic() > deadline:
            return snap
        time.sleep(0.01)


def _ai_first_session(client, **body) -> tuple[str, dict]:
    """Find a seed whose first round opens on the AI's turn."""
    for seed in range(64):
        session_id, _ = _create(client, seed=seed, **body)
        snap = client.post(f"/sessions/{session_id}/round").json()["snapshot"]
        if snap["awaiting_ai"]:
            return session_id, snap
        client.delete(f"/sessions/{session_id}")
    pytest.fail("no seed opened on the AI's turn")


def test_create_session(client):
    """POST /sessions starts a match with default rules."""
    session_id, data = _create(client, seed=1)
    snap = data["snapshot"]
    assert snap["phase"] == "awaiting_round_start"
    assert snap["player_total_tokens"] == 20
    assert snap["ai_total_tokens"] == 20
    assert snap["action"] == "start_round"
    assert snap["action_label"] == "Start New Round"
    assert snap["action_enabled"] is True
    assert data["config"]["tokens_per_round_stake"] == 5
    assert client.get(f"/sessions/{session_id}").json()["snapshot"] == snap


def test_create_session_with_rules(client):
    _, data = _create(client, seed=3, initial_tokens_per_player=8, tokens_per_round_stake=2, ai_delay_seconds=0)
    assert data["snapshot"]["player_total_tokens"] == 8
    assert data["config"]["tokens_per_round_stake"] == 2
    assert data["ai_delay_seconds"] == 0


def test_create_session_rejects_bad_probability(client):
    resp = client.post("/sessions", json={"player_flip_probability": 1.5})
    assert resp.status_code == 422


def test_unknown_session(client):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions/nope/round").status_code == 404
    assert client.post("/sessions/nope/throw").status_code == 404


def test_start_round_stakes_pool(client):
    session_id, _ = _create(client, seed=5, ai_delay_seconds=0)
    snap = client.post(f"/sessions/{session_id}/round").json()["snapshot"]
    assert snap["pool_size"] == 10
    assert snap["player_total_tokens"] == 15
    assert snap["ai_total_tokens"] == 15
    assert snap["phase"] == "round_in_progress"
    assert snap["action"] == "throw"


def test_throw_rejected_while_ai_thinking(client):
    session_id, snap = _ai_first_session(client, ai_delay_seconds=60)
    assert snap["action_enabled"] is False
    assert client.post(f"/sessions/{session_id}/throw").status_code == 409
    assert client.post(f"/sessions/{session_id}/action").status_code == 409


def test_ai_throws_after_delay(client):
    session_id, snap = _ai_first_session(client, ai_delay_seconds=0)
    assert snap["pool_size"] == 10
    after = _wait_for_player(client, session_id)
    assert after["awaiting_ai"] is False
    assert after["player_total_tokens"] + after["ai_total_tokens"] + after["pool_size"] == 40


def test_full_match_with_action_button(client):
    session_id, _ = _create(client, seed=2024, ai_delay_seconds=0)
    snap = None
    for _ in range(2000):
        snap = _wait_for_player(client, session_id)
        if snap["phase"] == "match_over":
            break
        resp = client.post(f"/sessions/{session_id}/action")
        assert resp.status_code == 200
    assert snap["phase"] == "match_over"
    assert snap["action"] == "start_match"
    assert snap["player_total_tokens"] + snap["ai_total_tokens"] == 40
    # Button on a finished match starts a new one
    again = client.post(f"/sessions/{session_id}/action").json()["snapshot"]
    assert again["phase"] == "awaiting_round_start"
    assert again["player_match_score"] == 0


def test_restart_match(client):
    session_id, _ = _create(client, seed=9, ai_delay_seconds=60)
    client.post(f"/sessions/{session_id}/round")
    snap = client.post(f"/sessions/{session_id}/match").json()["snapshot"]
    assert snap["phase"] == "awaiting_round_start"
    assert snap["pool_size"] == 0
    assert snap["player_total_tokens"] == 20


def test_delete_session(client):
    session_id, _ = _ai_first_session(client, ai_delay_seconds=60)
    resp = client.delete(f"/sessions/{session_id}")
    assert resp.status_code == 200
    assert resp.json()["deleted"] is True
    assert client.get(f"/sessions/{session_id}").status_code == 404


def test_websocket_pushes_snapshots(client):
    session_id, _ = _create(client, seed=11, ai_delay_seconds=60)
    with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
        first = ws.receive_json()
        assert first["type"] == "snapshot"
        assert first["phase"] == "awaiting_round_start"
        client.post(f"/sessions/{session_id}/round")
        pushed = ws.receive_json()
        assert pushed["type"] == "snapshot"
        assert pushed["phase"] == "round_in_progress"
        assert pushed["pool_size"] == 10
    client.delete(f"/sessions/{session_id}")


def test_same_seed_same_opening(client):
    a, _ = _create(client, seed=77, ai_delay_seconds=60)
    b, _ = _create(client, seed=77, ai_delay_seconds=60)
    snap_a = client.post(f"/sessions/{a}/round").json()["snapshot"]
    snap_b = client.post(f"/sessions/{b}/round").json()["snapshot"]
    assert snap_a == snap_b
