import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .common import NonEmptyStr, PartialUpdate


class BehaviorPromptBase(BaseModel):
    chatbot_id: uuid.UUID
    prompt_text: NonEmptyStr
    is_active: bool = True


class BehaviorPromptCreate(BehaviorPromptBase):
    pass


class BehaviorPromptUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "prompt_text", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    prompt_text: Optional[NonEmptyStr] = None
    is_active: Optional[bool] = None


class BehaviorPrompt(BehaviorPromptBase):
    id: uuid.UUID
    user_id: uuid.UUID
    embedding: Optional[List[float]] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class KnowledgePromptBase(BaseModel):
    chatbot_id: uuid.UUID
    prompt_text: NonEmptyStr
    category: NonEmptyStr
    is_active: bool = True


class KnowledgePromptCreate(KnowledgePromptBase):
    pass


class KnowledgePromptUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "prompt_text", "category", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    prompt_text: Optional[NonEmptyStr] = None
    category: Optional[NonEmptyStr] = None
    is_active: Optional[bool] = None


class KnowledgePrompt(KnowledgePromptBase):
    id: uuid.UUID
    user_id: uuid.UUID
    embedding: Optional[List[float]] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
