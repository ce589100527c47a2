"""
API Server Tests

Drives the FastAPI app through TestClient with an injected engine on
fake time, so responses are deterministic and nothing ticks in the
background.
"""

import pytest
from fastapi.testclient import TestClient

from skillgraph.api.server import create_app

from ..fixtures import FailingProvider, make_engine


@pytest.fixture
def engine():
    return make_engine()


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine=engine, stream_interval=0.01)) as test_client:
        yield test_client


class TestLifecycle:

    def test_health(self, client, engine):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "online"
        assert body["provider"] == "static"
        assert body["nodes"] == 8
        assert body["running"] is True

    def test_not_ready_without_lifespan(self, engine):
        response = TestClient(create_app(engine=engine)).get("/health")
        assert response.status_code == 503

    def test_shutdown_closes_engine(self, engine):
        with TestClient(create_app(engine=engine)) as test_client:
            test_client.get("/health")
        assert not engine.is_active


class TestGraph:

    def test_get_graph(self, client):
        body = client.get("/api/v1/graph").json()
        assert [n["node_id"] for n in body["nodes"]][:2] == ["1", "2"]
        node = body["nodes"][0]
        assert node["x"] == round(node["x"], 2)
        assert {"source_id", "target_id", "strength", "kind", "style"} <= set(body["edges"][0])
        assert body["generated_at"].endswith("Z")

    def test_load_skills_reports_skips(self, client):
        response = client.post("/api/v1/skills", json={"skills": [
            {"id": "a", "name": "Rust", "level": 60},
            {"id": "b", "name": "", "level": 60},
        ]})
        assert response.status_code == 200
        body = response.json()
        assert body["report"]["accepted"] == ["a"]
        assert body["report"]["skipped"][0]["index"] == 1
        assert [n["node_id"] for n in body["graph"]["nodes"]] == ["a"]


class TestEvents:

    def test_drag_sequence(self, client):
        client.post("/api/v1/events", json={"action": "drag_start", "node_id": "1"})
        client.post("/api/v1/events", json={"action": "drag", "node_id": "1", "x": 12.5, "y": -3.0})
        body = client.post("/api/v1/events", json={"action": "drag_end", "node_id": "1"}).json()
        node = next(n for n in body["nodes"] if n["node_id"] == "1")
        assert node["pin"] == "pinned"
        assert (node["x"], node["y"]) == (12.5, -3.0)

    def test_click_and_hover(self, client):
        client.post("/api/v1/events", json={"action": "node_click", "node_id": "3"})
        body = client.post("/api/v1/events", json={"action": "node_hover", "node_id": "1"}).json()
        assert body["selected_id"] == "3"
        assert body["highlighted_ids"] == ["1", "2"]

    def test_unknown_action(self, client):
        response = client.post("/api/v1/events", json={"action": "teleport", "node_id": "1"})
        assert response.status_code == 400

    def test_invalid_transition(self, client):
        response = client.post("/api/v1/events", json={"action": "drag_end", "node_id": "1"})
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "INVALID_STATE_TRANSITION"

    def test_unknown_node(self, client):
        response = client.post("/api/v1/events", json={"action": "drag_start", "node_id": "zzz"})
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "UNKNOWN_NODE"

    def test_drag_missing_coordinates(self, client):
        client.post("/api/v1/events", json={"action": "drag_start", "node_id": "1"})
        response = client.post("/api/v1/events", json={"action": "drag", "node_id": "1"})
        assert response.status_code == 400


class TestSuggestions:

    def test_generate_accept_reject(self, client):
        response = client.post("/api/v1/suggestions")
        assert response.status_code == 200
        added = response.json()["added"]
        assert sorted(n["label"] for n in added) == ["GraphQL", "Redux"]
        assert all(n["suggested"] for n in added)

        first, second = added[0]["node_id"], added[1]["node_id"]

        accepted = client.post(f"/api/v1/suggestions/{first}/accept")
        assert accepted.status_code == 200
        assert accepted.json()["suggested"] is False

        rejected = client.delete(f"/api/v1/suggestions/{second}")
        assert rejected.status_code == 200
        assert rejected.json() == {"removed": second}

        graph = client.get("/api/v1/graph").json()
        ids = {n["node_id"] for n in graph["nodes"]}
        assert first in ids and second not in ids

    def test_nothing_new_is_404(self, client):
        assert client.post("/api/v1/suggestions").status_code == 200
        response = client.post("/api/v1/suggestions")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "SUGGESTION_EMPTY"

    def test_core_node_is_not_a_suggestion(self, client):
        response = client.delete("/api/v1/suggestions/1")
        assert response.status_code == 409

    def test_unknown_suggestion(self, client):
        assert client.post("/api/v1/suggestions/ghost/accept").status_code == 404

    def test_provider_failure_is_502(self):
        engine = make_engine(provider=FailingProvider())
        with TestClient(create_app(engine=engine)) as test_client:
            response = test_client.post("/api/v1/suggestions")
        assert response.status_code == 502
        assert response.json()["detail"]["code"] == "SUGGESTION_FAILED"
        assert len(engine.graph) == 8


class TestStream:

    def test_stream_emits_snapshot(self, client):
        response = client.get("/api/v1/stream", params={"limit": 1})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.text.startswith("data: ")
        assert '"nodes"' in response.text
