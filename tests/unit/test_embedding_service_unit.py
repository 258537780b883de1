import uuid

import pytest
import requests

from botpanel.db import models
from botpanel.services import (
    EmbeddingConfig,
    EmbeddingProviderError,
    EmbeddingService,
    get_embedding_service,
    reset_embedding_service_for_tests,
)
from botpanel.services import embedding_service as embedding_module


@pytest.fixture(autouse=True)
def reset_embedding(monkeypatch):
    for var in (
        "EMBEDDING_PROVIDER",
        "EMBEDDING_DIMENSION",
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "OPENAI_EMBEDDING_MODEL",
        "OLLAMA_BASE_URL",
        "OLLAMA_EMBEDDING_MODEL",
        "HUGGINGFACE_API_KEY",
        "HUGGINGFACE_EMBEDDING_MODEL",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_embedding_service_for_tests()
    yield
    reset_embedding_service_for_tests()


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return self._payload


def test_default_provider_is_disabled():
    service = get_embedding_service()
    assert service.is_enabled is False
    assert service.embed_text("anything") is None


def test_mock_provider_embedding(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "8")
    reset_embedding_service_for_tests()
    service = get_embedding_service()
    vector = service.embed_text("sample text")
    assert vector is not None
    assert len(vector) == 8
    assert service.embed_text("sample text") == vector


def test_embed_text_blank_returns_none(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    reset_embedding_service_for_tests()
    assert get_embedding_service().embed_text("   ") is None


def test_attach_embedding_sets_prompt_vector(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "4")
    reset_embedding_service_for_tests()
    prompt = models.BehaviorPrompt(id=uuid.uuid4(), chatbot_id=uuid.uuid4(), prompt_text="Be kind")
    get_embedding_service().attach_embedding(prompt)
    assert len(prompt.embedding) == 4


def test_unknown_provider_is_disabled(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "nonsense")
    assert EmbeddingConfig.from_env().provider == "disabled"


def test_openai_requires_api_key(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "openai")
    assert EmbeddingService().is_enabled is False


def test_openai_provider_request(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "3")
    calls = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        calls["url"] = url
        calls["headers"] = headers
        calls["json"] = json
        return _FakeResponse({"data": [{"embedding": [0.1, 0.2, 0.3]}]})

    monkeypatch.setattr(embedding_module.requests, "post", fake_post)
    service = EmbeddingService()
    assert service.embed_text("hello") == [0.1, 0.2, 0.3]
    assert calls["url"] == "https://api.openai.com/v1/embeddings"
    assert calls["headers"]["Authorization"] == "Bearer sk-test"
    assert calls["json"] == {"model": "text-embedding-ada-002", "input": "hello"}


def test_openai_malformed_payload_raises(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(embedding_module.requests, "post", lambda *a, **k: _FakeResponse({"data": []}))
    with pytest.raises(EmbeddingProviderError):
        EmbeddingService().embed_text("hello")


def test_http_errors_are_wrapped(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "ollama")
    monkeypatch.setattr(embedding_module.requests, "post", lambda *a, **k: _FakeResponse({}, status_code=500))
    with pytest.raises(EmbeddingProviderError):
        EmbeddingService().embed_text("hello")


def test_ollama_provider(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "ollama")
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://ollama:11434/")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "2")
    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen["url"] = url
        return _FakeResponse({"embedding": [1, 2]})

    monkeypatch.setattr(embedding_module.requests, "post", fake_post)
    assert EmbeddingService().embed_text("hi") == [1.0, 2.0]
    assert seen["url"] == "http://ollama:11434/api/embeddings"


@pytest.mark.parametrize(
    "payload",
    [[[0.5, 0.25]], [0.5, 0.25], {"embeddings": [0.5, 0.25]}],
)
def test_huggingface_payload_shapes(monkeypatch, payload):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "hf")
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf-test")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "2")
    monkeypatch.setattr(embedding_module.requests, "post", lambda *a, **k: _FakeResponse(payload))
    assert EmbeddingService().embed_text("hi") == [0.5, 0.25]


def test_dimension_defaults_to_storage_width(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    assert EmbeddingConfig.from_env().dimension == 1536
    assert len(EmbeddingService().embed_text("hello")) == 1536


def test_provider_width_mismatch_raises(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "ollama")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "4")
    monkeypatch.setattr(embedding_module.requests, "post", lambda *a, **k: _FakeResponse({"embedding": [0.1] * 768}))
    with pytest.raises(EmbeddingProviderError, match="768 dimensions, expected 4"):
        EmbeddingService().embed_text("hello")


def test_backfill_missing_embeddings(monkeypatch, db_session):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "4")
    user = models.User(email="backfill@example.com")
    db_session.add(user)
    db_session.commit()
    bot = models.Chatbot(user_id=user.id, name_chatbot="Bot")
    db_session.add(bot)
    db_session.commit()
    db_session.add_all([
        models.BehaviorPrompt(user_id=user.id, chatbot_id=bot.id, prompt_text="Be nice"),
        models.KnowledgePrompt(user_id=user.id, chatbot_id=bot.id, prompt_text="Open 9-5", category="hours"),
        models.KnowledgePrompt(user_id=user.id, chatbot_id=bot.id, prompt_text="   ", category="blank"),
    ])
    db_session.commit()

    updated = EmbeddingService().backfill_missing_embeddings(db_session, batch_size=1)

    assert updated == 2
    assert db_session.query(models.BehaviorPrompt).filter(models.BehaviorPrompt.embedding.is_(None)).count() == 0
    # Blank text cannot be embedded and is skipped rather than retried forever
    assert db_session.query(models.KnowledgePrompt).filter(models.KnowledgePrompt.embedding.is_(None)).count() == 1


def test_backfill_disabled_is_noop(db_session):
    assert EmbeddingService().backfill_missing_embeddings(db_session) == 0
