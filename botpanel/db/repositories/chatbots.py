"""
Chatbot repository functions.

Chatbot CRUD with per-owner case-insensitive name lookup, the ownership check
used by every child table, and cascading deletes.
"""
from __future__ import annotations

import uuid
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from botpanel.db import models, schemas
from botpanel.db.repositories import owned

# Models whose chatbot reference is optional; deleting the chatbot detaches them.
DETACHABLE_MODELS = (
    models.Lead,
    models.ProductService,
    models.CustomerInsight,
    models.BusinessDocument,
    models.AiConfig,
    models.ConversationContext,
)


def flow_ordering():
    return [models.BotFlow.priority.asc(), models.BotFlow.created_at.asc()]


def create_chatbot(db: Session, chatbot: schemas.ChatbotCreate, *, user_id: uuid.UUID):
    return owned.create_owned(db, models.Chatbot, user_id, chatbot.model_dump())


def get_chatbot(db: Session, chatbot_id: uuid.UUID, *, user_id: uuid.UUID):
    return owned.get_owned(db, models.Chatbot, chatbot_id, user_id)


def get_chatbot_by_name(db: Session, name_chatbot: str, *, user_id: uuid.UUID):
    return (
        owned.scoped_query(db, models.Chatbot, user_id)
        .filter(func.lower(models.Chatbot.name_chatbot) == func.lower(name_chatbot.strip()))
        .first()
    )


def get_chatbots(db: Session, *, user_id: uuid.UUID, is_active: Optional[bool] = None):
    return owned.list_owned(db, models.Chatbot, user_id, filters={"is_active": is_active})


def update_chatbot(db: Session, chatbot_id: uuid.UUID, chatbot: schemas.ChatbotUpdate, *, user_id: uuid.UUID):
    return owned.update_owned(
        db, models.Chatbot, chatbot_id, user_id, chatbot.model_dump(exclude_unset=True)
    )


def delete_chatbot(db: Session, chatbot_id: uuid.UUID, *, user_id: uuid.UUID) -> bool:
    """Delete a chatbot, its dependent rows, and detach optional references."""
    try:
        db_chatbot = get_chatbot(db, chatbot_id, user_id=user_id)
        if not db_chatbot:
            return False
        for model in DETACHABLE_MODELS:
            db.query(model).filter(
                model.chatbot_id == chatbot_id, model.user_id == user_id
            ).update({model.chatbot_id: None}, synchronize_session=False)
        # Flows, welcomes, prompts, blacklist and client data go through the
        # relationship cascades (welcome trackings follow their welcome/client).
        db.delete(db_chatbot)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete chatbot {chatbot_id}: {str(e)}")
