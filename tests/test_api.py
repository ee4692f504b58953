"""Tests for the FastAPI host."""

import pytest
from fastapi.testclient import TestClient

from apps.api.main import create_app
from apps.api.sessions import SessionRegistry

from pose_fixtures import MOUNTAIN, T_POSE, make_records


def _catalog_payload():
    return [
        {"name": "Mountain Pose", "description": "Stand tall", "image": "/poses/mountain.jpg",
         "keypoints": make_records(MOUNTAIN)},
        {"name": "T Pose", "keypoints": make_records(T_POSE)},
        {"name": "Unknown Pose", "keypoints": make_records(MOUNTAIN)},
    ]


def _frame_payload(points=MOUNTAIN, t=None):
    payload = {"keypoints": make_records(points, confidence=0.9)}
    if t is not None:
        payload["timestamp_ms"] = t
    return payload


@pytest.fixture
def client():
    app = create_app(SessionRegistry())
    with TestClient(app) as c:
        assert c.put("/catalog", json=_catalog_payload()).json() == {"count": 2}
        yield c


class TestCatalog:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["catalog_size"] == 2

    def test_get_catalog(self, client):
        poses = client.get("/catalog").json()["poses"]
        assert [p["name"] for p in poses] == ["Mountain Pose", "T Pose"]
        assert poses[0]["image"] == "/poses/mountain.jpg"

    def test_invalid_catalog(self, client):
        bad = [{"name": "Short", "keypoints": make_records(MOUNTAIN)[:10]}]
        resp = client.put("/catalog", json=bad)
        assert resp.status_code == 400
        assert client.get("/health").json()["catalog_size"] == 2

    def test_catalog_reload_keeps_sessions(self, client):
        session_id = client.post("/sessions", json={"target": "T Pose"}).json()["session_id"]
        client.put("/catalog", json=_catalog_payload()[:1])
        resp = client.post(f"/sessions/{session_id}/classify", json=_frame_payload())
        assert resp.status_code == 200


class TestSessions:
    def test_classify_converges(self, client):
        session_id = client.post("/sessions", json={"target": "Mountain Pose"}).json()["session_id"]
        bodies = [
            client.post(f"/sessions/{session_id}/classify", json=_frame_payload(t=i * 33)).json()
            for i in range(3)
        ]
        assert bodies[0]["label"] == "Unknown"
        assert bodies[0]["raw_label"] == "Mountain Pose"
        assert bodies[2]["label"] == "Mountain Pose"
        assert bodies[2]["confidence"] >= 0.55
        assert bodies[2]["target_matched"] is True

    def test_session_without_body(self, client):
        resp = client.post("/sessions")
        assert resp.status_code == 200
        assert resp.json()["target"] is None

    def test_unknown_target(self, client):
        assert client.post("/sessions", json={"target": "Crow Pose"}).status_code == 400

    def test_reset(self, client):
        session_id = client.post("/sessions").json()["session_id"]
        for i in range(3):
            client.post(f"/sessions/{session_id}/classify", json=_frame_payload(t=i))
        assert client.post(f"/sessions/{session_id}/reset").json() == {"success": True}
        body = client.post(f"/sessions/{session_id}/classify", json=_frame_payload(t=10)).json()
        assert body["label"] == "Unknown"
        assert body["confidence"] == 0.0

    def test_set_target(self, client):
        session_id = client.post("/sessions").json()["session_id"]
        resp = client.put(f"/sessions/{session_id}/target", json={"target": "T Pose"})
        assert resp.json() == {"success": True, "target": "T Pose"}
        assert client.put(f"/sessions/{session_id}/target", json={"target": "Nope"}).status_code == 400

    def test_sessions_are_independent(self, client):
        a = client.post("/sessions").json()["session_id"]
        b = client.post("/sessions").json()["session_id"]
        for i in range(3):
            client.post(f"/sessions/{a}/classify", json=_frame_payload(t=i))
        body = client.post(f"/sessions/{b}/classify", json=_frame_payload(t=3)).json()
        assert body["label"] == "Unknown"

    def test_wrong_frame_length(self, client):
        session_id = client.post("/sessions").json()["session_id"]
        payload = {"keypoints": make_records(MOUNTAIN)[:17]}
        assert client.post(f"/sessions/{session_id}/classify", json=payload).status_code == 400

    def test_unknown_session(self, client):
        assert client.post("/sessions/missing/classify", json=_frame_payload()).status_code == 404
        assert client.post("/sessions/missing/reset").status_code == 404

    def test_close_session(self, client):
        session_id = client.post("/sessions").json()["session_id"]
        assert client.delete(f"/sessions/{session_id}").json() == {"success": True}
        assert client.delete(f"/sessions/{session_id}").status_code == 404

    def test_mixed_timestamps(self, client):
        session_id = client.post("/sessions").json()["session_id"]
        for i in range(3):
            client.post(f"/sessions/{session_id}/classify", json=_frame_payload(t=i * 33))
        resp = client.post(f"/sessions/{session_id}/classify", json=_frame_payload())
        assert resp.status_code == 400
        body = client.post(f"/sessions/{session_id}/classify", json=_frame_payload(t=99)).json()
        assert body["label"] == "Mountain Pose"


def test_session_limit():
    app = create_app(SessionRegistry(max_sessions=1))
    with TestClient(app) as c:
        assert c.post("/sessions").status_code == 200
        assert c.post("/sessions").status_code == 429
