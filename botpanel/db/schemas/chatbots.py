import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import NonEmptyStr, PartialUpdate


def split_keywords(value):
    """Normalize flow keywords from a comma-separated string or a list."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValueError("keyword must be a string or a list of strings")
    return [str(k).strip() for k in value if str(k).strip()]


class ChatbotBase(BaseModel):
    name_chatbot: NonEmptyStr
    description: Optional[str] = None
    is_active: bool = True


class ChatbotCreate(ChatbotBase):
    pass


class ChatbotUpdate(PartialUpdate):
    non_nullable = frozenset({"name_chatbot", "is_active"})

    name_chatbot: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class Chatbot(ChatbotBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BotFlowBase(BaseModel):
    chatbot_id: uuid.UUID
    keyword: List[str] = Field(min_length=1)
    response_text: NonEmptyStr
    media_url: Optional[str] = None
    is_active: bool = True
    priority: int = 0

    @field_validator("keyword", mode="before")
    @classmethod
    def _split_keyword(cls, value):
        return split_keywords(value)


class BotFlowCreate(BotFlowBase):
    pass


class BotFlowUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "keyword", "response_text", "is_active", "priority"})

    chatbot_id: Optional[uuid.UUID] = None
    keyword: Optional[List[str]] = Field(default=None, min_length=1)
    response_text: Optional[NonEmptyStr] = None
    media_url: Optional[str] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None

    @field_validator("keyword", mode="before")
    @classmethod
    def _split_keyword(cls, value):
        return split_keywords(value)


class BotFlow(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    chatbot_id: uuid.UUID
    keyword: List[str]
    response_text: str
    media_url: Optional[str] = None
    is_active: bool
    priority: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WelcomeBase(BaseModel):
    chatbot_id: uuid.UUID
    welcome_message: NonEmptyStr
    media_url: Optional[str] = None
    is_active: bool = True


class WelcomeCreate(WelcomeBase):
    pass


class WelcomeUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "welcome_message", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    welcome_message: Optional[NonEmptyStr] = None
    media_url: Optional[str] = None
    is_active: Optional[bool] = None


class Welcome(WelcomeBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BlacklistEntryBase(BaseModel):
    chatbot_id: uuid.UUID
    phone_number: NonEmptyStr
    is_active: bool = True


class BlacklistEntryCreate(BlacklistEntryBase):
    pass


class BlacklistEntryUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "phone_number", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    phone_number: Optional[NonEmptyStr] = None
    is_active: Optional[bool] = None


class BlacklistEntry(BlacklistEntryBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
