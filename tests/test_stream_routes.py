from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from facetrack.api.main import app


def _event(t: float, width: int = 1000, height: int = 500) -> dict:
    return {"type": "timeupdate", "t": t, "width": width, "height": height}


def test_overlay_socket_answers_time_updates_in_order(app_state):
    app_state.load_video("clip.mp4")
    client = TestClient(app)
    with client.websocket_connect("/stream/overlay") as ws:
        ws.send_json(_event(0.5))
        ws.send_json(_event(0.6, 500, 250))
        ws.send_json(_event(2.0))

        first = ws.receive_json()
        assert first["type"] == "overlay"
        assert len(first["boxes"]) == 2
        assert first["boxes"][0]["x"] == pytest.approx(100)

        second = ws.receive_json()
        assert (second["width"], second["height"]) == (500, 250)
        assert second["boxes"][0]["x"] == pytest.approx(100)

        assert ws.receive_json()["boxes"] == []


def test_overlay_socket_ping(app_state):
    with TestClient(app).websocket_connect("/stream/overlay") as ws:
        ws.send_json({"type": "ping", "t": 42})
        data = ws.receive_json()
        assert data["type"] == "pong"
        assert data["t"] == 42
        assert "server_time" in data


def test_overlay_socket_reports_errors_and_stays_open(app_state):
    with TestClient(app).websocket_connect("/stream/overlay") as ws:
        ws.send_json(_event(0.5))
        assert ws.receive_json() == {"type": "error", "detail": "No video loaded"}

        ws.send_text("not json")
        assert ws.receive_json()["detail"] == "message must be JSON"

        ws.send_json([1, 2])
        assert ws.receive_json()["detail"] == "message must be an object"

        ws.send_json({"type": "timeupdate", "t": 0.5, "width": -1, "height": 10})
        err = ws.receive_json()
        assert err["type"] == "error"
        assert err["detail"][0]["loc"] == ["width"]

        app_state.load_video("clip.mp4")
        ws.send_json(_event(0.5))
        assert len(ws.receive_json()["boxes"]) == 2
