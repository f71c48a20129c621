import time

import pytest
from fastapi.testclient import TestClient

from amuse_server.main import create_app
from amuse_server.services.gesture_map import SPIDER_MAN_TABLE

QUEUE = {
    "tracks": [
        {"catalog_id": "1", "title": "Redbone", "artist": "Childish Gambino"},
        {"catalog_id": "2", "title": "Heartbeat", "artist": "Childish Gambino"},
    ],
    "autoplay": True,
}


def wait_for_status(client, predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    status = None
    while time.monotonic() < deadline:
        status = client.get("/status").json()
        if predicate(status):
            return status
        time.sleep(0.01)
    raise AssertionError(f"status never matched: {status}")


@pytest.fixture
def client():
    with TestClient(create_app(space_open_timeout=5.0)) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_status_on_startup(client):
    status = client.get("/status").json()
    assert status["space_state"] == "closed"
    assert status["loop_state"] == "running"
    assert status["gesture_table"] == "peace-sign"
    assert status["last_detected_identity"] is None


def test_peace_sign_pauses_playback(client):
    assert client.put("/playback/queue", json=QUEUE).json()["playback"]["is_playing"] is True

    resp = client.post("/gestures", json={
        "match": "partial", "package": "peacesign.gesturecomposer", "name": "Peace Sign", "stage": 1,
    })
    assert resp.json() == {"status": "queued", "match": "partial"}
    resp = client.post("/gestures", json={"package": "peacesign.gesturecomposer", "name": "Peace Sign"})
    assert resp.json()["status"] == "queued"

    status = wait_for_status(client, lambda s: s["last_detected_identity"] == "Peace Sign")
    assert status["playback"]["is_playing"] is False
    assert status["playback"]["track"]["title"] == "Redbone"


def test_ring_touch_skips_next(client):
    client.put("/playback/queue", json=QUEUE)
    client.post("/gestures", json={"name": "ring", "title": "Ring thumb tip touch"})

    status = wait_for_status(client, lambda s: s["last_detected_identity"] == "Ring thumb tip touch")
    assert status["playback"]["track"]["title"] == "Heartbeat"


def test_unknown_gesture_is_reported(client):
    client.post("/gestures", json={"name": "wave", "description": "some unrecognized string"})

    status = wait_for_status(client, lambda s: s["diagnostics"])
    assert status["diagnostics"][0]["kind"] == "unknown_gesture"
    assert status["diagnostics"][0]["identity"] == "some unrecognized string"


def test_partial_without_stage_is_rejected(client):
    resp = client.post("/gestures", json={"match": "partial", "name": "Peace Sign"})
    assert resp.status_code == 422


def test_open_space_round_trip(client):
    dashboard = {"name": "leftfist", "description": "Opening the dashboard"}

    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json()["type"] == "status"

        client.post("/gestures", json=dashboard)
        request = ws.receive_json()
        assert request["type"] == "open_space"
        assert client.get("/status").json()["space_state"] == "in_transition"

        resp = client.post("/space/result", json={"request_id": request["request_id"], "outcome": "opened"})
        assert resp.json() == {"status": "ok", "outcome": "opened"}
        gesture = ws.receive_json()
        assert gesture["type"] == "gesture"
        assert gesture["command"] == "toggle_immersive_space"

        resp = client.post("/space/lifecycle", json={"state": "open"})
        assert resp.json()["space_state"] == "open"

        # Already open: no second request, only the detection broadcast.
        client.post("/gestures", json=dashboard)
        gesture = ws.receive_json()
        assert gesture["type"] == "gesture"
        assert gesture["space_state"] == "open"

    resp = client.post("/space/lifecycle", json={"state": "closed"})
    assert resp.json()["space_state"] == "closed"


def test_cancelled_open_reverts_to_closed(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        client.post("/gestures", json={"name": "leftfist", "description": "Opening the dashboard"})
        request = ws.receive_json()
        client.post("/space/result", json={"request_id": request["request_id"], "outcome": "user_cancelled"})
        ws.receive_json()

    status = client.get("/status").json()
    assert status["space_state"] == "closed"
    assert status["diagnostics"][-1]["kind"] == "space_open_failed"


def test_result_for_unknown_request_is_ignored(client):
    resp = client.post("/space/result", json={"request_id": "nope", "outcome": "opened"})
    assert resp.json()["status"] == "ignored"


def test_alternative_gesture_table():
    with TestClient(create_app(table=SPIDER_MAN_TABLE)) as c:
        c.put("/playback/queue", json=QUEUE)
        c.post("/gestures", json={"name": "spiderman", "title": "Spider-Man"})

        status = wait_for_status(c, lambda s: s["last_detected_identity"] == "Spider-Man")
        assert status["gesture_table"] == "spider-man"
        assert status["playback"]["is_playing"] is False


def test_app_restarts_with_new_stream():
    app = create_app()
    with TestClient(app):
        pass
    with TestClient(app) as c:
        # A new lifespan opens a new stream, so gestures are accepted again.
        assert c.post("/gestures", json={"name": "wave"}).json()["status"] == "queued"


def test_active_gesture_table(client):
    table = client.get("/gestures/table").json()

    assert table["name"] == "peace-sign"
    assert table["gestures"]["Peace Sign"] == "toggle_play_pause"
    assert table["gestures"]["Opening the dashboard"] == "toggle_immersive_space"
