"""
Customer-facing data endpoints: leads, products/services, customer insights,
business documents and client contacts.
"""
from dataclasses import dataclass
from typing import Optional
import uuid

from botpanel.db import models, schemas
from botpanel.api.owned import build_owned_router
from botpanel.api.conversation import CHATBOT_REFERENCE, ChatbotScopedFilters


@dataclass
class LeadFilters:
    chatbot_id: Optional[uuid.UUID] = None
    status: Optional[schemas.LeadStatus] = None
    is_active: Optional[bool] = None


@dataclass
class ProductServiceFilters:
    chatbot_id: Optional[uuid.UUID] = None
    category: Optional[str] = None
    active: Optional[bool] = None


@dataclass
class CustomerInsightFilters:
    chatbot_id: Optional[uuid.UUID] = None
    customer_type: Optional[schemas.CustomerType] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass
class BusinessDocumentFilters:
    chatbot_id: Optional[uuid.UUID] = None
    document_type: Optional[schemas.DocumentType] = None
    category: Optional[str] = None
    active: Optional[bool] = None


leads_router = build_owned_router(
    prefix="/leads",
    tags=["leads"],
    model=models.Lead,
    create_schema=schemas.LeadCreate,
    update_schema=schemas.LeadUpdate,
    read_schema=schemas.Lead,
    filters_cls=LeadFilters,
    label="Lead",
    references=CHATBOT_REFERENCE,
)

products_services_router = build_owned_router(
    prefix="/products-services",
    tags=["products-services"],
    model=models.ProductService,
    create_schema=schemas.ProductServiceCreate,
    update_schema=schemas.ProductServiceUpdate,
    read_schema=schemas.ProductService,
    filters_cls=ProductServiceFilters,
    label="Product/service",
    references=CHATBOT_REFERENCE,
)

customer_insights_router = build_owned_router(
    prefix="/customer-insights",
    tags=["customer-insights"],
    model=models.CustomerInsight,
    create_schema=schemas.CustomerInsightCreate,
    update_schema=schemas.CustomerInsightUpdate,
    read_schema=schemas.CustomerInsight,
    filters_cls=CustomerInsightFilters,
    label="Customer insight",
    references=CHATBOT_REFERENCE,
)

business_documents_router = build_owned_router(
    prefix="/business-documents",
    tags=["business-documents"],
    model=models.BusinessDocument,
    create_schema=schemas.BusinessDocumentCreate,
    update_schema=schemas.BusinessDocumentUpdate,
    read_schema=schemas.BusinessDocument,
    filters_cls=BusinessDocumentFilters,
    label="Business document",
    references=CHATBOT_REFERENCE,
)

client_data_router = build_owned_router(
    prefix="/client-data",
    tags=["client-data"],
    model=models.ClientData,
    create_schema=schemas.ClientDataCreate,
    update_schema=schemas.ClientDataUpdate,
    read_schema=schemas.ClientData,
    filters_cls=ChatbotScopedFilters,
    label="Client",
    references=CHATBOT_REFERENCE,
)
