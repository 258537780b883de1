"""Business logic services package with public service helpers."""

from .embedding_service import (
    EmbeddingConfig,
    EmbeddingProviderError,
    EmbeddingService,
    get_embedding_service,
    reset_embedding_service_for_tests,
)

__all__ = [
    "EmbeddingConfig",
    "EmbeddingProviderError",
    "EmbeddingService",
    "get_embedding_service",
    "reset_embedding_service_for_tests",
]
