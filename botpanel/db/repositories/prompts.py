"""
Behavior and knowledge prompt repository functions.

Prompts carry an embedding of their text. The two create paths differ in
when the provider is called:

* behavior prompts are inserted first and embedded afterwards, so a provider
  failure leaves the row stored without an embedding;
* knowledge prompts are embedded first, so a provider failure stores nothing.

Both raise :class:`EmbeddingProviderError` on provider failure; a disabled
provider stores a null embedding.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional
from sqlalchemy.orm import Session

from botpanel.db import models, schemas
from botpanel.db.repositories import owned
from botpanel.services.embedding_service import EmbeddingProviderError, EmbeddingService
from botpanel.utils.feature_flags import embedding_on_write_enabled

logger = logging.getLogger(__name__)


def _embed(service: EmbeddingService, text: str):
    if not embedding_on_write_enabled():
        return None
    return service.embed_text(text)


def create_behavior_prompt(
    db: Session,
    prompt: schemas.BehaviorPromptCreate,
    *,
    user_id: uuid.UUID,
    embedding_service: EmbeddingService,
):
    db_prompt = owned.create_owned(db, models.BehaviorPrompt, user_id, prompt.model_dump())
    try:
        vector = _embed(embedding_service, db_prompt.prompt_text)
    except EmbeddingProviderError:
        logger.warning(
            "Behavior prompt stored without embedding",
            extra={"prompt_id": str(db_prompt.id), "user_id": str(user_id)},
        )
        raise
    if vector is not None:
        db_prompt.embedding = vector
        owned.commit_or_rollback(db)
        db.refresh(db_prompt)
    return db_prompt


def create_knowledge_prompt(
    db: Session,
    prompt: schemas.KnowledgePromptCreate,
    *,
    user_id: uuid.UUID,
    embedding_service: EmbeddingService,
):
    values = prompt.model_dump()
    values["embedding"] = _embed(embedding_service, values["prompt_text"])
    return owned.create_owned(db, models.KnowledgePrompt, user_id, values)


def update_prompt(
    db: Session,
    model,
    prompt_id: uuid.UUID,
    changes: dict,
    *,
    user_id: uuid.UUID,
    embedding_service: EmbeddingService,
):
    """Apply ``changes``; a changed ``prompt_text`` is re-embedded after the save.

    Returns None when the caller owns no such prompt. The text change is kept
    even when the provider then fails.
    """
    db_prompt = owned.get_owned(db, model, prompt_id, user_id)
    if db_prompt is None:
        return None
    text_changed = "prompt_text" in changes and changes["prompt_text"] != db_prompt.prompt_text
    if text_changed:
        # The old vector no longer describes the text
        changes = {**changes, "embedding": None}
    db_prompt = owned.update_owned(db, model, prompt_id, user_id, changes)
    if text_changed:
        vector = _embed(embedding_service, db_prompt.prompt_text)
        if vector is not None:
            db_prompt.embedding = vector
            owned.commit_or_rollback(db)
            db.refresh(db_prompt)
    return db_prompt


def reembed_prompt(
    db: Session,
    model,
    prompt_id: uuid.UUID,
    *,
    user_id: uuid.UUID,
    embedding_service: EmbeddingService,
) -> Optional[object]:
    """Recompute the embedding of one prompt regardless of the on-write flag."""
    db_prompt = owned.get_owned(db, model, prompt_id, user_id)
    if db_prompt is None:
        return None
    embedding_service.attach_embedding(db_prompt)
    owned.commit_or_rollback(db)
    db.refresh(db_prompt)
    return db_prompt
