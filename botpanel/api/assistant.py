"""
Assistant tuning endpoints: AI configurations, stored conversation context
and welcome-message tracking. Each router can be switched off with its
feature flag.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import uuid

from botpanel.db import models, schemas
from botpanel.api.owned import build_owned_router
from botpanel.api.conversation import CHATBOT_REFERENCE


@dataclass
class AiConfigFilters:
    chatbot_id: Optional[uuid.UUID] = None
    enabled: Optional[bool] = None


@dataclass
class ConversationContextFilters:
    chatbot_id: Optional[uuid.UUID] = None
    phone_number: Optional[str] = None
    role: Optional[schemas.ConversationRole] = None
    is_active: Optional[bool] = None


@dataclass
class WelcomeTrackingFilters:
    client_id: Optional[uuid.UUID] = None
    welcome_id: Optional[uuid.UUID] = None
    status: Optional[schemas.TrackingStatus] = None
    is_active: Optional[bool] = None


def merge_ai_settings(row: models.AiConfig, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a partial settings patch into the stored settings object."""
    if "settings" not in changes:
        return changes
    patch = {k: v for k, v in changes["settings"].items() if v is not None}
    return {**changes, "settings": {**(row.settings or {}), **patch}}


ai_configs_router = build_owned_router(
    prefix="/ai-configs",
    tags=["ai-configs"],
    model=models.AiConfig,
    create_schema=schemas.AiConfigCreate,
    update_schema=schemas.AiConfigUpdate,
    read_schema=schemas.AiConfig,
    filters_cls=AiConfigFilters,
    label="AI config",
    references=CHATBOT_REFERENCE,
    prepare_update=merge_ai_settings,
    feature_flag="ai_config_enabled",
)

conversation_contexts_router = build_owned_router(
    prefix="/conversation-contexts",
    tags=["conversation-contexts"],
    model=models.ConversationContext,
    create_schema=schemas.ConversationContextCreate,
    update_schema=schemas.ConversationContextUpdate,
    read_schema=schemas.ConversationContext,
    filters_cls=ConversationContextFilters,
    label="Conversation context",
    references=CHATBOT_REFERENCE,
    feature_flag="conversation_context_enabled",
)

welcome_trackings_router = build_owned_router(
    prefix="/welcome-trackings",
    tags=["welcome-trackings"],
    model=models.WelcomeTracking,
    create_schema=schemas.WelcomeTrackingCreate,
    update_schema=schemas.WelcomeTrackingUpdate,
    read_schema=schemas.WelcomeTracking,
    filters_cls=WelcomeTrackingFilters,
    label="Welcome tracking",
    references=[
        ("client_id", models.ClientData, "Client"),
        ("welcome_id", models.Welcome, "Welcome message"),
    ],
    feature_flag="welcome_tracking_enabled",
)
