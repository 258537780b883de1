"""
Conversation configuration endpoints: flows, welcome messages and blacklist.

All three tables hang off a chatbot the caller owns.
"""
from dataclasses import dataclass
from typing import Optional
import uuid

from botpanel.db import models, schemas
from botpanel.db.repositories.chatbots import flow_ordering
from botpanel.api.owned import build_owned_router

CHATBOT_REFERENCE = [("chatbot_id", models.Chatbot, "Chatbot")]


@dataclass
class ChatbotScopedFilters:
    chatbot_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


flows_router = build_owned_router(
    prefix="/flows",
    tags=["flows"],
    model=models.BotFlow,
    create_schema=schemas.BotFlowCreate,
    update_schema=schemas.BotFlowUpdate,
    read_schema=schemas.BotFlow,
    filters_cls=ChatbotScopedFilters,
    label="Flow",
    references=CHATBOT_REFERENCE,
    order_by=flow_ordering,
)

welcomes_router = build_owned_router(
    prefix="/welcomes",
    tags=["welcomes"],
    model=models.Welcome,
    create_schema=schemas.WelcomeCreate,
    update_schema=schemas.WelcomeUpdate,
    read_schema=schemas.Welcome,
    filters_cls=ChatbotScopedFilters,
    label="Welcome message",
    references=CHATBOT_REFERENCE,
)

blacklist_router = build_owned_router(
    prefix="/blacklist",
    tags=["blacklist"],
    model=models.BlacklistEntry,
    create_schema=schemas.BlacklistEntryCreate,
    update_schema=schemas.BlacklistEntryUpdate,
    read_schema=schemas.BlacklistEntry,
    filters_cls=ChatbotScopedFilters,
    label="Blacklist entry",
    references=CHATBOT_REFERENCE,
    conflict_detail="Phone number already blacklisted for this chatbot",
)
