"""
Behavior and knowledge prompt endpoints.

Reads, toggle and delete come from the shared owner-scoped router; writes go
through the prompt repository so the prompt text gets embedded. Provider
failures surface as 502; on behavior prompts the row is still stored.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from botpanel.db import models, schemas
from botpanel.db.database import get_db
from botpanel.db.repositories import prompts as prompt_repo
from botpanel.api.deps import get_current_user_id
from botpanel.api.owned import CONSTRAINT_VIOLATION, build_owned_router, ensure_references_owned
from botpanel.api.conversation import CHATBOT_REFERENCE
from botpanel.services.embedding_service import EmbeddingProviderError, get_embedding_service

logger = logging.getLogger(__name__)

PROVIDER_FAILED = "Embedding provider failed"


@dataclass
class BehaviorPromptFilters:
    chatbot_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


@dataclass
class KnowledgePromptFilters:
    chatbot_id: Optional[uuid.UUID] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None


behavior_router = build_owned_router(
    prefix="/behavior-prompts",
    tags=["behavior-prompts"],
    model=models.BehaviorPrompt,
    create_schema=schemas.BehaviorPromptCreate,
    update_schema=schemas.BehaviorPromptUpdate,
    read_schema=schemas.BehaviorPrompt,
    filters_cls=BehaviorPromptFilters,
    label="Behavior prompt",
    references=CHATBOT_REFERENCE,
    custom_writes=True,
)

knowledge_router = build_owned_router(
    prefix="/knowledge-prompts",
    tags=["knowledge-prompts"],
    model=models.KnowledgePrompt,
    create_schema=schemas.KnowledgePromptCreate,
    update_schema=schemas.KnowledgePromptUpdate,
    read_schema=schemas.KnowledgePrompt,
    filters_cls=KnowledgePromptFilters,
    label="Knowledge prompt",
    references=CHATBOT_REFERENCE,
    custom_writes=True,
)


def _provider_failed(exc: EmbeddingProviderError) -> HTTPException:
    logger.error("Embedding provider failure: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=PROVIDER_FAILED)


def _update(db: Session, model, prompt_id: uuid.UUID, payload, user_id: uuid.UUID, label: str):
    changes = payload.model_dump(exclude_unset=True)
    ensure_references_owned(db, user_id, changes, CHATBOT_REFERENCE)
    try:
        db_prompt = prompt_repo.update_prompt(
            db, model, prompt_id, changes, user_id=user_id, embedding_service=get_embedding_service()
        )
    except EmbeddingProviderError as exc:
        raise _provider_failed(exc)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONSTRAINT_VIOLATION)
    if db_prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return db_prompt


def _reembed(db: Session, model, prompt_id: uuid.UUID, user_id: uuid.UUID, label: str):
    service = get_embedding_service()
    if not service.is_enabled:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Embedding provider disabled")
    try:
        db_prompt = prompt_repo.reembed_prompt(db, model, prompt_id, user_id=user_id, embedding_service=service)
    except EmbeddingProviderError as exc:
        raise _provider_failed(exc)
    if db_prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return db_prompt


@behavior_router.post("/", response_model=schemas.BehaviorPrompt, status_code=status.HTTP_201_CREATED)
def create_behavior_prompt_endpoint(
    prompt: schemas.BehaviorPromptCreate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    ensure_references_owned(db, user_id, prompt.model_dump(), CHATBOT_REFERENCE)
    try:
        return prompt_repo.create_behavior_prompt(
            db, prompt, user_id=user_id, embedding_service=get_embedding_service()
        )
    except EmbeddingProviderError as exc:
        raise _provider_failed(exc)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONSTRAINT_VIOLATION)


@behavior_router.api_route("/{prompt_id}", methods=["PATCH", "PUT"], response_model=schemas.BehaviorPrompt)
def update_behavior_prompt_endpoint(
    prompt_id: uuid.UUID,
    prompt_update: schemas.BehaviorPromptUpdate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return _update(db, models.BehaviorPrompt, prompt_id, prompt_update, user_id, "Behavior prompt")


@behavior_router.post("/{prompt_id}/embed", response_model=schemas.BehaviorPrompt)
def embed_behavior_prompt_endpoint(
    prompt_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return _reembed(db, models.BehaviorPrompt, prompt_id, user_id, "Behavior prompt")


@knowledge_router.post("/", response_model=schemas.KnowledgePrompt, status_code=status.HTTP_201_CREATED)
def create_knowledge_prompt_endpoint(
    prompt: schemas.KnowledgePromptCreate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    ensure_references_owned(db, user_id, prompt.model_dump(), CHATBOT_REFERENCE)
    try:
        return prompt_repo.create_knowledge_prompt(
            db, prompt, user_id=user_id, embedding_service=get_embedding_service()
        )
    except EmbeddingProviderError as exc:
        raise _provider_failed(exc)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONSTRAINT_VIOLATION)


@knowledge_router.api_route("/{prompt_id}", methods=["PATCH", "PUT"], response_model=schemas.KnowledgePrompt)
def update_knowledge_prompt_endpoint(
    prompt_id: uuid.UUID,
    prompt_update: schemas.KnowledgePromptUpdate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return _update(db, models.KnowledgePrompt, prompt_id, prompt_update, user_id, "Knowledge prompt")


@knowledge_router.post("/{prompt_id}/embed", response_model=schemas.KnowledgePrompt)
def embed_knowledge_prompt_endpoint(
    prompt_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return _reembed(db, models.KnowledgePrompt, prompt_id, user_id, "Knowledge prompt")
