import uuid
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import NonEmptyStr, PartialUpdate, metadata_field

ConversationRole = Literal["user", "assistant", "system"]
TrackingStatus = Literal["pending", "in_progress", "completed"]


class AiSettings(BaseModel):
    name: NonEmptyStr
    model: str = "gpt-3.5-turbo"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=150, gt=0)
    system_prompt: Optional[str] = None
    priority: int = 0


class AiSettingsPatch(BaseModel):
    """Settings keys to merge into the stored settings object."""
    name: Optional[NonEmptyStr] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    system_prompt: Optional[str] = None
    priority: Optional[int] = None


class AiConfigCreate(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    settings: AiSettings
    enabled: bool = True


class AiConfigUpdate(PartialUpdate):
    non_nullable = frozenset({"settings", "enabled"})

    chatbot_id: Optional[uuid.UUID] = None
    settings: Optional[AiSettingsPatch] = None
    enabled: Optional[bool] = None


class AiConfig(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    chatbot_id: Optional[uuid.UUID] = None
    settings: Dict[str, Any]
    enabled: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ConversationContextBase(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    phone_number: NonEmptyStr
    role: ConversationRole = "user"
    content: NonEmptyStr
    metadata_col: Dict[str, Any] = metadata_field(default_factory=dict)
    is_active: bool = True


class ConversationContextCreate(ConversationContextBase):
    timestamp: Optional[datetime] = None


class ConversationContextUpdate(PartialUpdate):
    non_nullable = frozenset({"phone_number", "role", "content", "metadata_col", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    phone_number: Optional[NonEmptyStr] = None
    role: Optional[ConversationRole] = None
    content: Optional[NonEmptyStr] = None
    metadata_col: Optional[Dict[str, Any]] = metadata_field(default=None)
    timestamp: Optional[datetime] = None
    is_active: Optional[bool] = None


class ConversationContext(ConversationContextBase):
    id: uuid.UUID
    user_id: uuid.UUID
    timestamp: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WelcomeTrackingBase(BaseModel):
    client_id: uuid.UUID
    welcome_id: uuid.UUID
    status: TrackingStatus = "pending"
    notes: Optional[str] = None
    is_active: bool = True


class WelcomeTrackingCreate(WelcomeTrackingBase):
    interaction_date: Optional[datetime] = None


class WelcomeTrackingUpdate(PartialUpdate):
    non_nullable = frozenset({"client_id", "welcome_id", "status", "is_active"})

    client_id: Optional[uuid.UUID] = None
    welcome_id: Optional[uuid.UUID] = None
    status: Optional[TrackingStatus] = None
    interaction_date: Optional[datetime] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class WelcomeTracking(WelcomeTrackingBase):
    id: uuid.UUID
    user_id: uuid.UUID
    interaction_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
