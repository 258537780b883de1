import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import NonEmptyStr, PartialUpdate, metadata_field

LeadStatus = Literal["pending", "in_progress", "converted"]
CustomerType = Literal["potencialmente_interesado", "curioso", "cliente_activo"]
DocumentType = Literal["info", "schedule", "policy", "other"]


class LeadBase(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    full_name: NonEmptyStr
    email: Optional[str] = None
    phone: Optional[str] = None
    status: LeadStatus = "pending"
    notes: Optional[str] = None
    is_active: bool = True


class LeadCreate(LeadBase):
    pass


class LeadUpdate(PartialUpdate):
    non_nullable = frozenset({"full_name", "status", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    full_name: Optional[NonEmptyStr] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[LeadStatus] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class Lead(LeadBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ProductServiceBase(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    name: NonEmptyStr
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    active: bool = True


class ProductServiceCreate(ProductServiceBase):
    pass


class ProductServiceUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "active"})

    chatbot_id: Optional[uuid.UUID] = None
    name: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    active: Optional[bool] = None


class ProductService(ProductServiceBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CustomerInsightBase(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    phone_number: NonEmptyStr
    customer_type: CustomerType
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    last_interaction: Optional[datetime] = None
    interaction_count: int = Field(default=0, ge=0)
    metadata_col: Dict[str, Any] = metadata_field(default_factory=dict)
    is_active: bool = True


class CustomerInsightCreate(CustomerInsightBase):
    pass


class CustomerInsightUpdate(PartialUpdate):
    non_nullable = frozenset({
        "phone_number", "customer_type", "confidence_score", "interaction_count", "metadata_col", "is_active",
    })

    chatbot_id: Optional[uuid.UUID] = None
    phone_number: Optional[NonEmptyStr] = None
    customer_type: Optional[CustomerType] = None
    confidence_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    last_interaction: Optional[datetime] = None
    interaction_count: Optional[int] = Field(default=None, ge=0)
    metadata_col: Optional[Dict[str, Any]] = metadata_field(default=None)
    is_active: Optional[bool] = None


class CustomerInsight(CustomerInsightBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


def _clean_tags(value):
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    return [str(t).strip() for t in value if str(t).strip()]


class BusinessDocumentBase(BaseModel):
    chatbot_id: Optional[uuid.UUID] = None
    title: NonEmptyStr
    content: Optional[str] = None
    document_type: DocumentType = "info"
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata_col: Dict[str, Any] = metadata_field(default_factory=dict)
    priority: int = 0
    active: bool = True

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        return _clean_tags(value)


class BusinessDocumentCreate(BusinessDocumentBase):
    pass


class BusinessDocumentUpdate(PartialUpdate):
    non_nullable = frozenset({"title", "document_type", "tags", "metadata_col", "priority", "active"})

    chatbot_id: Optional[uuid.UUID] = None
    title: Optional[NonEmptyStr] = None
    content: Optional[str] = None
    document_type: Optional[DocumentType] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    metadata_col: Optional[Dict[str, Any]] = metadata_field(default=None)
    priority: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        return _clean_tags(value)


class BusinessDocument(BusinessDocumentBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ClientDataBase(BaseModel):
    chatbot_id: uuid.UUID
    identification_number: Optional[str] = None
    full_name: NonEmptyStr
    phone_number: NonEmptyStr
    email: Optional[str] = None
    media_url: Optional[str] = None
    is_active: bool = True


class ClientDataCreate(ClientDataBase):
    pass


class ClientDataUpdate(PartialUpdate):
    non_nullable = frozenset({"chatbot_id", "full_name", "phone_number", "is_active"})

    chatbot_id: Optional[uuid.UUID] = None
    identification_number: Optional[str] = None
    full_name: Optional[NonEmptyStr] = None
    phone_number: Optional[NonEmptyStr] = None
    email: Optional[str] = None
    media_url: Optional[str] = None
    is_active: Optional[bool] = None


class ClientData(ClientDataBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
