"""Custom SQLAlchemy types used by the persistence layer."""
from __future__ import annotations

import json
import os
from typing import Iterable, List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects import postgresql
from sqlalchemy.types import JSON, Text, TypeDecorator

DEFAULT_EMBEDDING_DIMENSION = 1536


def configured_embedding_dimension() -> int:
    """Width of the prompt embedding columns (EMBEDDING_DIMENSION, default 1536)."""
    raw = (os.getenv("EMBEDDING_DIMENSION") or "").strip()
    return int(raw) if raw.isdigit() and int(raw) > 0 else DEFAULT_EMBEDDING_DIMENSION


class _SafePGVector(Vector):
    """Vector variant resilient to psycopg returning Python sequences."""

    def result_processor(self, dialect, coltype):  # type: ignore[override]
        base_processor = super().result_processor(dialect, coltype)

        def process(value):
            if isinstance(value, (list, tuple)):
                return [float(v) for v in value]
            return base_processor(value)

        return process


class EmbeddingVector(TypeDecorator[List[float]]):
    """Store embedding vectors with pgvector on PostgreSQL.

    Falls back to JSON storage on dialects that do not support pgvector
    (e.g. SQLite during unit tests).
    """

    cache_ok = True
    impl = JSON

    def __init__(self, dimension: Optional[int] = None) -> None:
        super().__init__()
        self._dimension = dimension

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(_SafePGVector(self._dimension))
        return dialect.type_descriptor(JSON(none_as_null=True))

    def process_bind_param(self, value, dialect):  # type: ignore[override]
        if value is None:
            return None
        if isinstance(value, tuple):
            value = list(value)
        if not isinstance(value, Iterable):
            raise TypeError(
                f"EmbeddingVector expects an iterable of floats, got {type(value)!r}"
            )
        vector = [float(v) for v in value]
        if dialect.name == "postgresql" and self._dimension and len(vector) != self._dimension:
            raise ValueError(
                f"Embedding dimension mismatch: expected {self._dimension}, got {len(vector)}"
            )
        return vector

    def process_result_value(self, value, dialect):  # type: ignore[override]
        if value is None:
            return None
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return [float(v) for v in parsed]
            except json.JSONDecodeError:
                # Postgres array string format "{..}" or pgvector text "[..]".
                stripped = value.strip("{}[]")
                if not stripped:
                    return []
                return [float(part) for part in stripped.split(",")]
        if isinstance(value, (list, tuple)):
            return [float(v) for v in value]
        if hasattr(value, "tolist"):
            return [float(v) for v in value.tolist()]
        return value

    def copy(self, **kwargs):  # type: ignore[override]
        return EmbeddingVector(dimension=self._dimension)


class StringList(TypeDecorator[List[str]]):
    """List of strings: native ``text[]`` on PostgreSQL, JSON elsewhere."""

    cache_ok = True
    impl = JSON

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.ARRAY(Text()))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):  # type: ignore[override]
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        return [str(v) for v in value]

    def process_result_value(self, value, dialect):  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, str):
            parsed = json.loads(value)
            return [str(v) for v in parsed]
        return [str(v) for v in value]
