import pytest
from fastapi.testclient import TestClient

from ai_learning.engine import PreferenceEngine
from backend.app import create_app
from data.dummy_session_repository_impl import DummySessionRepositoryImpl


@pytest.fixture
def client():
    app = create_app(PreferenceEngine(repository=DummySessionRepositoryImpl()))
    with TestClient(app) as c:
        yield c


class TestFeedbackRoutes:
    def test_like_then_score(self, client, person):
        r = client.post("/feedback", json={"action": "LIKE", "entity": person, "rationale": "strong"})
        assert r.status_code == 200
        body = r.json()
        assert body["entity_id"] == "p-1"
        assert body["cumulative_reward"] == 1.0
        assert body["warnings"] == []

        r = client.get("/score/p-1")
        assert r.status_code == 200
        assert r.json()["score"] > 50

    def test_invalid_action_is_400(self, client, person):
        r = client.post("/feedback", json={"action": "MAYBE", "entity": person})
        assert r.status_code == 400
        assert "Unknown action" in r.json()["detail"]

    def test_pairs(self, client, person, other_person):
        r = client.post("/pairs", json={"chosen": person, "rejected": other_person, "rationale": "background"})
        assert r.status_code == 200
        assert r.json()["action"] == "PAIR_PREFERENCE"
        assert client.get("/admin/stats").json()["pairs"] == 1


class TestScoreRoutes:
    def test_unknown_entity_is_404(self, client):
        assert client.get("/score/nobody").status_code == 404

    def test_score_payload(self, client, signal):
        r = client.post("/score", json={"entity": signal})
        assert r.status_code == 200
        body = r.json()
        assert body["score"] == 65
        assert body["reasons"] == ["High seniority: Co-Founder", "Founder signal: New Company"]

    def test_rank_and_similar(self, client, person, other_person, company):
        client.post("/feedback", json={"action": "DISLIKE", "entity": other_person, "rationale": "weak"})
        client.post("/feedback", json={"action": "SAVE", "entity": person})
        r = client.post("/rank", json={"entities": [other_person, company, person], "limit": 2})
        body = r.json()
        assert body["total"] == 3
        assert [item["entity_id"] for item in body["results"]] == ["p-1", "c-1"]

        r = client.post("/similar", json={"entity": other_person})
        assert [item["entity_id"] for item in r.json()] == ["p-1"]


class TestAdminRoutes:
    def test_preferences_export_clear(self, client, person):
        client.post("/feedback", json={"action": "LIKE", "entity": person, "rationale": "strong"})
        prefs = client.get("/admin/preferences", params={"limit": 3}).json()
        assert len(prefs) == 3
        assert prefs[0]["net"] == pytest.approx(0.15)

        doc = client.get("/admin/export").json()
        assert doc["format"] == "preference-pairs"
        assert doc["stats"]["likes"] == 1
        dpo = client.get("/admin/export", params={"format": "dpo"}).json()
        assert dpo[0]["source"] == "LIKE"

        assert client.get("/admin/patterns").json()["preferred_industries"] == ["AI"]
        assert client.post("/admin/clear").json() == {"cleared": True, "warnings": []}
        assert client.get("/admin/stats").json()["likes"] == 0

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
