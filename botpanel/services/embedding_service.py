"""Embedding provider abstraction used by the behavior/knowledge prompt pipeline."""
from __future__ import annotations

import hashlib
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Type, Union

import requests

from botpanel.db import models
from botpanel.db.types import configured_embedding_dimension

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (3, 60)

PromptModel = Union[models.BehaviorPrompt, models.KnowledgePrompt]
PROMPT_MODELS: Sequence[Type[PromptModel]] = (models.BehaviorPrompt, models.KnowledgePrompt)


class EmbeddingProviderError(RuntimeError):
    """Raised when the configured provider cannot produce an embedding."""


@dataclass
class EmbeddingConfig:
    provider: str
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    dimension: Optional[int] = None

    @classmethod
    def from_env(cls) -> "EmbeddingConfig":
        provider = (os.getenv("EMBEDDING_PROVIDER") or "disabled").strip().lower()
        # Every provider must produce vectors as wide as the storage column
        dim_value = configured_embedding_dimension()

        if provider == "openai":
            return cls(
                provider=provider,
                model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002"),
                base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
                api_key=os.getenv("OPENAI_API_KEY"),
                dimension=dim_value,
            )
        if provider == "ollama":
            return cls(
                provider=provider,
                model=os.getenv("OLLAMA_EMBEDDING_MODEL", "nomic-embed-text"),
                base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
                dimension=dim_value,
            )
        if provider in {"huggingface", "hf"}:
            return cls(
                provider="huggingface",
                model=os.getenv("HUGGINGFACE_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"),
                base_url=os.getenv("HUGGINGFACE_API_BASE", "https://api-inference.huggingface.co"),
                api_key=os.getenv("HUGGINGFACE_API_KEY"),
                dimension=dim_value,
            )
        if provider == "mock":
            return cls(provider=provider, dimension=dim_value)
        if provider in {"disabled", "none", "off", ""}:
            return cls(provider="disabled")
        logger.warning("Unknown EMBEDDING_PROVIDER '%s'; embeddings disabled.", provider)
        return cls(provider="disabled")

    @property
    def is_enabled(self) -> bool:
        if self.provider == "disabled":
            return False
        if self.provider == "openai" and not self.api_key:
            logger.warning("OPENAI_API_KEY must be set for OpenAI embeddings; disabling provider.")
            return False
        if self.provider == "huggingface" and not self.api_key:
            logger.warning("HUGGINGFACE_API_KEY must be set for HuggingFace embeddings; disabling provider.")
            return False
        return True


class BaseEmbeddingProvider:
    dimension: Optional[int] = None

    def embed(self, text: str) -> List[float]:
        raise NotImplementedError

    def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        return [self.embed(t) for t in texts]


class MockEmbeddingProvider(BaseEmbeddingProvider):
    def __init__(self, dimension: int = 32) -> None:
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        if not text:
            return [0.0] * self.dimension
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        values: List[float] = []
        for i in range(self.dimension):
            byte = digest[i % len(digest)]
            values.append((byte / 127.5) - 1.0)
        return values


class OpenAIEmbeddingProvider(BaseEmbeddingProvider):
    def __init__(self, model: str, base_url: str, api_key: str, dimension: Optional[int] = None) -> None:
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        response = requests.post(
            f"{self.base_url}/embeddings",
            headers=headers,
            json={"model": self.model, "input": text},
            timeout=_DEFAULT_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json().get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0].get("embedding"), list):
            raise RuntimeError("Unexpected OpenAI embedding response structure")
        return data[0]["embedding"]


class OllamaEmbeddingProvider(BaseEmbeddingProvider):
    def __init__(self, model: str, base_url: str, dimension: Optional[int] = None) -> None:
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        payload = {"model": self.model, "prompt": text}
        response = requests.post(
            f"{self.base_url}/api/embeddings",
            json=payload,
            timeout=_DEFAULT_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()
        vector = data.get("embedding")
        if not isinstance(vector, list):
            raise RuntimeError("Unexpected Ollama embedding response structure")
        return vector


class HuggingFaceEmbeddingProvider(BaseEmbeddingProvider):
    def __init__(self, model: str, base_url: str, api_key: str, dimension: Optional[int] = None) -> None:
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        url = f"{self.base_url}/models/{self.model}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        response = requests.post(url, headers=headers, json={"inputs": text}, timeout=_DEFAULT_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
        vector: Optional[List[float]] = None
        if isinstance(payload, list):
            if payload and isinstance(payload[0], list):
                vector = payload[0]
            elif all(isinstance(x, (int, float)) for x in payload):
                vector = payload
        elif isinstance(payload, dict):
            embeddings = payload.get("embeddings")
            if isinstance(embeddings, list):
                vector = embeddings
        if vector is None:
            raise RuntimeError("Unable to parse HuggingFace embedding response")
        return vector


class EmbeddingService:
    """High-level embedding helper used by the prompt repositories."""

    def __init__(self, config: Optional[EmbeddingConfig] = None) -> None:
        self.config = config or EmbeddingConfig.from_env()
        self._provider = self._build_provider()
        self._lock = threading.Lock()

    def _build_provider(self) -> Optional[BaseEmbeddingProvider]:
        if not self.config.is_enabled:
            return None
        provider = self.config.provider
        if provider == "openai":
            return OpenAIEmbeddingProvider(
                model=self.config.model or "text-embedding-ada-002",
                base_url=self.config.base_url or "https://api.openai.com/v1",
                api_key=self.config.api_key,
                dimension=self.config.dimension,
            )
        if provider == "ollama":
            return OllamaEmbeddingProvider(
                model=self.config.model or "nomic-embed-text",
                base_url=self.config.base_url or "http://localhost:11434",
                dimension=self.config.dimension,
            )
        if provider == "huggingface":
            return HuggingFaceEmbeddingProvider(
                model=self.config.model or "sentence-transformers/all-MiniLM-L6-v2",
                base_url=self.config.base_url or "https://api-inference.huggingface.co",
                api_key=self.config.api_key,
                dimension=self.config.dimension,
            )
        if provider == "mock":
            return MockEmbeddingProvider(dimension=self.config.dimension or configured_embedding_dimension())
        return None

    @property
    def is_enabled(self) -> bool:
        return self._provider is not None

    def embedding_dimension(self) -> Optional[int]:
        if self._provider is None:
            return None
        return getattr(self._provider, "dimension", self.config.dimension)

    def embed_text(self, text: str) -> Optional[List[float]]:
        """Return the embedding for ``text``; None when disabled or blank.

        Provider failures (transport errors, HTTP errors, malformed payloads)
        and vectors whose width differs from EMBEDDING_DIMENSION are raised
        as :class:`EmbeddingProviderError`.
        """
        if not self._provider:
            return None
        if not text or not text.strip():
            return None
        try:
            with self._lock:
                vector = self._provider.embed(text)
        except (requests.RequestException, RuntimeError, ValueError, KeyError, AttributeError) as exc:
            raise EmbeddingProviderError(f"{self.config.provider} embedding failed: {exc}") from exc
        expected = self.config.dimension
        if expected and len(vector) != expected:
            raise EmbeddingProviderError(
                f"{self.config.provider} returned {len(vector)} dimensions, expected {expected}"
            )
        return [float(v) for v in vector]

    def attach_embedding(self, prompt: PromptModel) -> Optional[List[float]]:
        """Compute and set ``prompt.embedding``; the caller commits."""
        vector = self.embed_text(prompt.prompt_text or "")
        prompt.embedding = vector
        return vector

    def backfill_missing_embeddings(
        self,
        db_session,
        *,
        batch_size: int = 100,
        prompt_models: Sequence[Type[PromptModel]] = PROMPT_MODELS,
    ) -> int:
        if not self.is_enabled:
            logger.info("Embedding service disabled; skipping backfill.")
            return 0
        run_started = time.perf_counter()
        updated = 0
        batch_count = 0
        for model in prompt_models:
            skipped_ids: List = []
            while True:
                query = db_session.query(model).filter(model.embedding.is_(None))
                if skipped_ids:
                    query = query.filter(model.id.notin_(skipped_ids))
                batch = query.order_by(model.created_at.asc()).limit(batch_size).all()
                if not batch:
                    break
                batch_count += 1
                batch_started = time.perf_counter()
                batch_updated = 0
                batch_errors: List[str] = []
                for prompt in batch:
                    try:
                        vector = self.attach_embedding(prompt)
                    except EmbeddingProviderError as exc:
                        logger.error("Embedding backfill error for %s %s: %s", model.__tablename__, prompt.id, exc)
                        batch_errors.append(str(prompt.id))
                        skipped_ids.append(prompt.id)
                        continue
                    if vector is None:
                        skipped_ids.append(prompt.id)
                        continue
                    updated += 1
                    batch_updated += 1
                db_session.commit()
                duration = time.perf_counter() - batch_started
                logger.info(
                    "Embedding backfill batch committed",
                    extra={
                        "table": model.__tablename__,
                        "batch_number": batch_count,
                        "batch_size": len(batch),
                        "updated_rows": batch_updated,
                        "duration_seconds": round(duration, 3),
                        "failed_ids": batch_errors,
                    },
                )
        total_duration = time.perf_counter() - run_started
        logger.info(
            "Embedding backfill completed",
            extra={
                "batches": batch_count,
                "total_updated": updated,
                "duration_seconds": round(total_duration, 3),
            },
        )
        return updated


_embedding_service: Optional[EmbeddingService] = None


def get_embedding_service() -> EmbeddingService:
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = EmbeddingService()
    return _embedding_service


def reset_embedding_service_for_tests() -> None:  # pragma: no cover - used in tests
    global _embedding_service
    _embedding_service = None
