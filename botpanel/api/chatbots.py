"""
Chatbots API endpoints.

CRUD for the caller's chatbots. Names are unique per owner
(case-insensitive); deleting a chatbot removes its flows, welcomes, prompts,
blacklist entries and client data.
"""
from dataclasses import dataclass
from typing import List, Optional
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from botpanel.db import models, schemas
from botpanel.db.database import get_db
from botpanel.db.repositories import chatbots as chatbot_repo
from botpanel.db.repositories import owned
from botpanel.api.deps import get_current_user_id
from botpanel.api.owned import CONSTRAINT_VIOLATION, serializer_for

router = APIRouter(prefix="/chatbots", tags=["chatbots"])

DUPLICATE_NAME = "Chatbot with this name already exists"


@dataclass
class ChatbotFilters:
    is_active: Optional[bool] = None


@router.post("/", response_model=schemas.Chatbot, status_code=status.HTTP_201_CREATED)
def create_chatbot_endpoint(
    chatbot: schemas.ChatbotCreate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    existing = chatbot_repo.get_chatbot_by_name(db, chatbot.name_chatbot, user_id=user_id)
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME)
    try:
        return chatbot_repo.create_chatbot(db, chatbot, user_id=user_id)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONSTRAINT_VIOLATION)


@router.get("/", response_model=List[schemas.Chatbot])
def get_all_chatbots_endpoint(
    filters: ChatbotFilters = Depends(ChatbotFilters),
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return chatbot_repo.get_chatbots(db, user_id=user_id, is_active=filters.is_active)


@router.get("/search/", response_model=List[schemas.Chatbot])
def search_chatbots_endpoint(
    query: str = "",
    filters: ChatbotFilters = Depends(ChatbotFilters),
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return owned.search_owned(
        db,
        models.Chatbot,
        user_id,
        query,
        serialize=serializer_for(schemas.Chatbot),
        filters={"is_active": filters.is_active},
    )


@router.get("/{chatbot_id}", response_model=schemas.Chatbot)
def get_chatbot_endpoint(
    chatbot_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    db_chatbot = chatbot_repo.get_chatbot(db, chatbot_id, user_id=user_id)
    if not db_chatbot:
        raise HTTPException(status_code=404, detail="Chatbot not found")
    return db_chatbot


@router.api_route("/{chatbot_id}", methods=["PATCH", "PUT"], response_model=schemas.Chatbot)
def update_chatbot_endpoint(
    chatbot_id: uuid.UUID,
    chatbot_update: schemas.ChatbotUpdate,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    db_chatbot = chatbot_repo.get_chatbot(db, chatbot_id, user_id=user_id)
    if not db_chatbot:
        raise HTTPException(status_code=404, detail="Chatbot not found")
    if chatbot_update.name_chatbot and chatbot_update.name_chatbot != db_chatbot.name_chatbot:
        existing = chatbot_repo.get_chatbot_by_name(db, chatbot_update.name_chatbot, user_id=user_id)
        if existing and existing.id != chatbot_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME)
    try:
        return chatbot_repo.update_chatbot(db, chatbot_id, chatbot_update, user_id=user_id)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CONSTRAINT_VIOLATION)


@router.post("/{chatbot_id}/toggle", response_model=schemas.Chatbot)
def toggle_chatbot_endpoint(
    chatbot_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    db_chatbot = owned.toggle_owned(db, models.Chatbot, chatbot_id, user_id)
    if not db_chatbot:
        raise HTTPException(status_code=404, detail="Chatbot not found")
    return db_chatbot


@router.delete("/{chatbot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chatbot_endpoint(
    chatbot_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    if not chatbot_repo.delete_chatbot(db, chatbot_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Chatbot not found")
    return None
