import json

import pytest

from botpanel.db import models
from botpanel.services import embedding_service, reset_embedding_service_for_tests
from botpanel.utils.feature_flags import refresh_feature_flag_cache


def _h(email):
    return {"x-auth-request-user": email.split("@")[0], "x-auth-request-email": email}


OWNER = _h("owner@example.com")


@pytest.fixture
def mock_provider(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "8")
    reset_embedding_service_for_tests()


@pytest.fixture
def failing_provider(monkeypatch, mock_provider):
    def _boom(self, text):
        raise RuntimeError("provider down")

    monkeypatch.setattr(embedding_service.MockEmbeddingProvider, "embed", _boom)


def _chatbot(client):
    return client.post("/chatbots/", json={"name_chatbot": "Bot"}, headers=OWNER).json()["id"]


def test_behavior_prompt_is_embedded(client, mock_provider):
    chatbot_id = _chatbot(client)
    r = client.post("/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Be polite"}, headers=OWNER)
    assert r.status_code == 201, r.text
    prompt = r.json()
    assert len(prompt["embedding"]) == 8


def test_knowledge_prompt_is_embedded(client, mock_provider):
    chatbot_id = _chatbot(client)
    r = client.post(
        "/knowledge-prompts/",
        json={"chatbot_id": chatbot_id, "prompt_text": "We open at 9", "category": "hours"},
        headers=OWNER,
    )
    assert r.status_code == 201, r.text
    assert len(r.json()["embedding"]) == 8


def test_disabled_provider_stores_null_embedding(client):
    chatbot_id = _chatbot(client)
    r = client.post("/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Be brief"}, headers=OWNER)
    assert r.status_code == 201
    assert r.json()["embedding"] is None


def test_behavior_prompt_survives_provider_failure(client, failing_provider, db_session):
    chatbot_id = _chatbot(client)
    r = client.post("/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Be polite"}, headers=OWNER)
    assert r.status_code == 502
    assert r.json()["detail"] == "Embedding provider failed"

    stored = db_session.query(models.BehaviorPrompt).all()
    assert len(stored) == 1
    assert stored[0].prompt_text == "Be polite"
    assert stored[0].embedding is None


def test_wrong_width_embedding_is_a_provider_failure(client, mock_provider, monkeypatch, db_session):
    monkeypatch.setattr(embedding_service.MockEmbeddingProvider, "embed", lambda self, text: [0.5] * 32)
    chatbot_id = _chatbot(client)
    r = client.post("/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Be polite"}, headers=OWNER)
    assert r.status_code == 502
    assert r.json()["detail"] == "Embedding provider failed"
    assert db_session.query(models.BehaviorPrompt).one().embedding is None


def test_knowledge_prompt_not_stored_on_provider_failure(client, failing_provider, db_session):
    chatbot_id = _chatbot(client)
    r = client.post(
        "/knowledge-prompts/",
        json={"chatbot_id": chatbot_id, "prompt_text": "Refunds within 30 days", "category": "policy"},
        headers=OWNER,
    )
    assert r.status_code == 502
    assert db_session.query(models.KnowledgePrompt).count() == 0


def test_on_write_flag_skips_inline_embedding(client, mock_provider, monkeypatch):
    monkeypatch.setenv("EMBEDDING_ON_WRITE_ENABLED", "false")
    refresh_feature_flag_cache()
    chatbot_id = _chatbot(client)
    r = client.post("/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Later"}, headers=OWNER)
    assert r.status_code == 201
    prompt = r.json()
    assert prompt["embedding"] is None

    r = client.post(f"/behavior-prompts/{prompt['id']}/embed", headers=OWNER)
    assert r.status_code == 200
    assert len(r.json()["embedding"]) == 8


def test_text_update_reembeds(client, mock_provider):
    chatbot_id = _chatbot(client)
    prompt = client.post(
        "/knowledge-prompts/",
        json={"chatbot_id": chatbot_id, "prompt_text": "Open at 9", "category": "hours"},
        headers=OWNER,
    ).json()

    r = client.patch(f"/knowledge-prompts/{prompt['id']}", json={"category": "schedule"}, headers=OWNER)
    assert r.status_code == 200
    assert r.json()["embedding"] == prompt["embedding"]

    r = client.patch(f"/knowledge-prompts/{prompt['id']}", json={"prompt_text": "Open at 10"}, headers=OWNER)
    assert r.status_code == 200
    updated = r.json()
    assert updated["prompt_text"] == "Open at 10"
    assert updated["embedding"] != prompt["embedding"]
    assert len(updated["embedding"]) == 8


def test_text_update_keeps_text_when_provider_fails(client, mock_provider, monkeypatch, db_session):
    chatbot_id = _chatbot(client)
    prompt = client.post(
        "/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Old"}, headers=OWNER
    ).json()

    def _boom(self, text):
        raise RuntimeError("provider down")

    monkeypatch.setattr(embedding_service.MockEmbeddingProvider, "embed", _boom)
    r = client.put(f"/behavior-prompts/{prompt['id']}", json={"prompt_text": "New"}, headers=OWNER)
    assert r.status_code == 502

    stored = db_session.query(models.BehaviorPrompt).one()
    assert stored.prompt_text == "New"
    assert stored.embedding is None


def test_embed_endpoint_requires_enabled_provider(client):
    chatbot_id = _chatbot(client)
    prompt = client.post(
        "/behavior-prompts/", json={"chatbot_id": chatbot_id, "prompt_text": "Hi"}, headers=OWNER
    ).json()
    r = client.post(f"/behavior-prompts/{prompt['id']}/embed", headers=OWNER)
    assert r.status_code == 503


def test_prompt_chatbot_must_be_owned(client, mock_provider, db_session):
    r = client.post(
        "/behavior-prompts/",
        json={"chatbot_id": _chatbot(client), "prompt_text": "Hi"},
        headers=_h("other@example.com"),
    )
    assert r.status_code == 404
    assert db_session.query(models.BehaviorPrompt).count() == 0


def test_prompt_search_ignores_embedding_digits(client, mock_provider):
    chatbot_id = _chatbot(client)
    prompt = client.post(
        "/knowledge-prompts/",
        json={"chatbot_id": chatbot_id, "prompt_text": "Parking available", "category": "venue"},
        headers=OWNER,
    ).json()
    r = client.get("/knowledge-prompts/search/", params={"query": "parking"}, headers=OWNER)
    assert len(r.json()) == 1
    vector_component = json.dumps(prompt["embedding"][0])
    r = client.get("/knowledge-prompts/search/", params={"query": vector_component}, headers=OWNER)
    assert r.json() == []
    r = client.get("/knowledge-prompts/", params={"category": "venue"}, headers=OWNER)
    assert len(r.json()) == 1
