"""
Domain-split Pydantic schemas with a compatibility aggregator.

This package re-exports every request/response schema so callers can use
`botpanel.db.schemas.<Name>`.
"""

from .common import NonEmptyStr, PartialUpdate
from .chatbots import (
    ChatbotBase,
    ChatbotCreate,
    ChatbotUpdate,
    Chatbot,
    BotFlowBase,
    BotFlowCreate,
    BotFlowUpdate,
    BotFlow,
    WelcomeBase,
    WelcomeCreate,
    WelcomeUpdate,
    Welcome,
    BlacklistEntryBase,
    BlacklistEntryCreate,
    BlacklistEntryUpdate,
    BlacklistEntry,
    split_keywords,
)
from .prompts import (
    BehaviorPromptBase,
    BehaviorPromptCreate,
    BehaviorPromptUpdate,
    BehaviorPrompt,
    KnowledgePromptBase,
    KnowledgePromptCreate,
    KnowledgePromptUpdate,
    KnowledgePrompt,
)
from .crm import (
    LeadStatus,
    CustomerType,
    DocumentType,
    LeadBase,
    LeadCreate,
    LeadUpdate,
    Lead,
    ProductServiceBase,
    ProductServiceCreate,
    ProductServiceUpdate,
    ProductService,
    CustomerInsightBase,
    CustomerInsightCreate,
    CustomerInsightUpdate,
    CustomerInsight,
    BusinessDocumentBase,
    BusinessDocumentCreate,
    BusinessDocumentUpdate,
    BusinessDocument,
    ClientDataBase,
    ClientDataCreate,
    ClientDataUpdate,
    ClientData,
)
from .assistant import (
    ConversationRole,
    TrackingStatus,
    AiSettings,
    AiSettingsPatch,
    AiConfigCreate,
    AiConfigUpdate,
    AiConfig,
    ConversationContextBase,
    ConversationContextCreate,
    ConversationContextUpdate,
    ConversationContext,
    WelcomeTrackingBase,
    WelcomeTrackingCreate,
    WelcomeTrackingUpdate,
    WelcomeTracking,
)
from .qr import AssignQR

__all__ = [
    "NonEmptyStr",
    "PartialUpdate",
    "ChatbotBase",
    "ChatbotCreate",
    "ChatbotUpdate",
    "Chatbot",
    "BotFlowBase",
    "BotFlowCreate",
    "BotFlowUpdate",
    "BotFlow",
    "WelcomeBase",
    "WelcomeCreate",
    "WelcomeUpdate",
    "Welcome",
    "BlacklistEntryBase",
    "BlacklistEntryCreate",
    "BlacklistEntryUpdate",
    "BlacklistEntry",
    "split_keywords",
    "BehaviorPromptBase",
    "BehaviorPromptCreate",
    "BehaviorPromptUpdate",
    "BehaviorPrompt",
    "KnowledgePromptBase",
    "KnowledgePromptCreate",
    "KnowledgePromptUpdate",
    "KnowledgePrompt",
    "LeadStatus",
    "CustomerType",
    "DocumentType",
    "LeadBase",
    "LeadCreate",
    "LeadUpdate",
    "Lead",
    "ProductServiceBase",
    "ProductServiceCreate",
    "ProductServiceUpdate",
    "ProductService",
    "CustomerInsightBase",
    "CustomerInsightCreate",
    "CustomerInsightUpdate",
    "CustomerInsight",
    "BusinessDocumentBase",
    "BusinessDocumentCreate",
    "BusinessDocumentUpdate",
    "BusinessDocument",
    "ClientDataBase",
    "ClientDataCreate",
    "ClientDataUpdate",
    "ClientData",
    "ConversationRole",
    "TrackingStatus",
    "AiSettings",
    "AiSettingsPatch",
    "AiConfigCreate",
    "AiConfigUpdate",
    "AiConfig",
    "ConversationContextBase",
    "ConversationContextCreate",
    "ConversationContextUpdate",
    "ConversationContext",
    "WelcomeTrackingBase",
    "WelcomeTrackingCreate",
    "WelcomeTrackingUpdate",
    "WelcomeTracking",
    "AssignQR",
]
