from __future__ import annotations

from fastapi.testclient import TestClient


def test_ws_session_updates_broadcast(client: TestClient) -> None:
    with client.websocket_connect("/ws/session") as ws:
        res = client.post("/session/start")
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg["type"] == "session_updated"
        assert msg["phase"] == "running"
        assert [e["type"] for e in msg["events"]] == ["SESSION_STARTED"]

        client.post("/session/answer", json={"text": "wrong"})
        msg = ws.receive_json()
        assert msg["phase"] == "idle"
        assert [e["type"] for e in msg["events"]] == ["ANSWER_REJECTED", "SESSION_ENDED"]
        assert msg["events"][-1]["payload"]["reason"] == "wrong_answer"
