"""
End-to-End Tests for the HTTP and WebSocket API
"""

import json

import pytest
from conftest import StubGenerator, make_utterance
from fastapi.testclient import TestClient

from classroom.api import routes
from classroom.api.app import create_app
from classroom.core.manager import ClassroomManager, fallback_goal_explanation
from classroom.core.time import ClockConfig


class StubLLM(StubGenerator):
    def __init__(self):
        super().__init__()
        self.closed = False

    async def generate_goal_explanation(self, subject, school_type, grade, topic_name, lesson_goal):
        return ""

    async def aclose(self):
        self.closed = True


@pytest.fixture
def llm():
    return StubLLM()


@pytest.fixture
def manager(tmp_path, llm):
    return ClassroomManager(base_dir=tmp_path, llm=llm, clock_config=ClockConfig(tick_seconds=3600))


@pytest.fixture
def client(manager):
    with TestClient(create_app(manager)) as c:
        yield c


class TestSessionRoutes:
    def test_create_with_defaults(self, client):
        resp = client.post("/api/sessions", json={})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["students"]) == 6
        assert body["subject"] == "math"
        assert body["curriculum"]["goal_explanation"] == fallback_goal_explanation("基礎学習", "基礎的な内容を理解し、説明できる")

    def test_list_get_delete(self, client):
        created = client.post("/api/sessions", json={"topic_name": "光合成", "subject": "science"}).json()

        listed = client.get("/api/sessions").json()
        assert [s["id"] for s in listed] == [created["id"]]
        assert client.get(f"/api/sessions/{created['id']}").json()["topic_name"] == "光合成"

        assert client.delete(f"/api/sessions/{created['id']}").json() == {"success": True}
        assert client.get(f"/api/sessions/{created['id']}").status_code == 404
        assert client.delete(f"/api/sessions/{created['id']}").status_code == 404

    def test_invalid_payload(self, client):
        resp = client.post("/api/sessions", json={"students": [{"name": "名無し"}]})
        assert resp.status_code == 400

    def test_supplied_characters_are_kept(self, client):
        payload = {
            "teacher": {"id": "t9", "name": "鈴木 一郎", "age": 50, "personality": "strict"},
            "students": [{"id": "a", "name": "A", "personality": "active"}],
            "curriculum": {"goal_explanation": "説明済み"},
        }
        body = client.post("/api/sessions", json=payload).json()
        assert body["teacher"]["name"] == "鈴木 一郎"
        assert [s["id"] for s in body["students"]] == ["a"]
        assert body["curriculum"]["goal_explanation"] == "説明済み"

    def test_session_id_must_be_one_path_segment(self, client, tmp_path):
        resp = client.post("/api/sessions", json={"id": "../../escaped"})
        assert resp.status_code == 400
        assert not (tmp_path.parent / "escaped").exists()
        assert client.get("/api/sessions").json() == []

    def test_unknown_subject_or_school_type(self, client):
        assert client.post("/api/sessions", json={"subject": "alchemy"}).status_code == 400
        assert client.post("/api/sessions", json={"school_type": "college"}).status_code == 400

    def test_caller_chosen_id_is_kept(self, client):
        body = client.post("/api/sessions", json={"id": "class-2b_math"}).json()
        assert body["id"] == "class-2b_math"
        assert client.get("/api/sessions/class-2b_math").status_code == 200

    def test_utterances_empty_and_state_missing(self, client):
        assert client.get("/api/sessions/unknown/utterances").json() == []
        assert client.get("/api/sessions/unknown/state").status_code == 404


class TestLessonSocket:
    def test_requires_session_id(self, client):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"type": "error", "message": "Session ID required"}

    def test_unknown_session(self, client):
        with client.websocket_connect("/ws?session_id=missing") as ws:
            assert ws.receive_json() == {"type": "error", "message": "Session not found"}

    def test_seek_reports_time_then_phase(self, client, manager):
        session_id = client.post("/api/sessions", json={}).json()["id"]
        with client.websocket_connect(f"/ws?session_id={session_id}") as ws:
            connected = ws.receive_json()
            assert connected["type"] == "connected"
            assert connected["session"]["id"] == session_id

            ws.send_text("not json")
            ws.send_text(json.dumps({"type": "seek", "minutes": 25}))
            assert ws.receive_json() == {"type": "time_update", "elapsed_minutes": 25.0}
            assert ws.receive_json() == {"type": "phase_change", "phase": "development2"}

            state = client.get(f"/api/sessions/{session_id}/state").json()
            assert state["phase"] == "development2"
            assert state["elapsed_minutes"] == 25.0

    def test_start_streams_opening_and_persists_it(self, client):
        session_id = client.post("/api/sessions", json={}).json()["id"]
        with client.websocket_connect(f"/ws?session_id={session_id}") as ws:
            ws.receive_json()
            ws.send_text(json.dumps({"type": "playback", "is_playing": True, "speed": 20}))
            ws.send_text(json.dumps({"type": "start"}))
            messages = [ws.receive_json() for _ in range(4)]

        assert [m["type"] for m in messages] == ["utterance"] * 4
        assert [m["utterance"]["content"] for m in messages[:3]] == ["起立！", "礼！", "着席！"]
        assert messages[3]["utterance"]["speaker_type"] == "teacher"

        stored = client.get(f"/api/sessions/{session_id}/utterances").json()
        assert [u["content"] for u in stored] == [m["utterance"]["content"] for m in messages]


def test_shutdown_closes_llm(manager, llm):
    with TestClient(create_app(manager)):
        pass
    assert llm.closed


class FakeSocket:
    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)


@pytest.mark.asyncio
async def test_transcript_failure_still_reaches_viewer(manager, monkeypatch):
    def broken_append(utterance, base_dir=None):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(routes, "append_utterance", broken_append)
    socket = FakeSocket()
    viewer = routes.WebSocketObserver(socket, manager, "s1")
    await viewer.on_utterance(make_utterance("こんにちは"))

    assert [m["type"] for m in socket.sent] == ["utterance"]
    assert socket.sent[0]["utterance"]["content"] == "こんにちは"
