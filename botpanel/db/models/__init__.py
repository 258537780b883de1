"""
Domain-split SQLAlchemy models with a compatibility aggregator.

This package exposes the public model API: `Base`, `now_utc`, and all ORM
classes.
"""

from .base import Base, now_utc  # re-export

# Domain models
from .users import User
from .chatbots import Chatbot, BotFlow, Welcome, BlacklistEntry
from .prompts import BehaviorPrompt, KnowledgePrompt
from .crm import Lead, ProductService, CustomerInsight, BusinessDocument, ClientData
from .assistant import AiConfig, ConversationContext, WelcomeTracking
from .qr import AssignQR

__all__ = [
    # base
    "Base",
    "now_utc",
    # users
    "User",
    # chatbots
    "Chatbot",
    "BotFlow",
    "Welcome",
    "BlacklistEntry",
    # prompts
    "BehaviorPrompt",
    "KnowledgePrompt",
    # crm
    "Lead",
    "ProductService",
    "CustomerInsight",
    "BusinessDocument",
    "ClientData",
    # assistant
    "AiConfig",
    "ConversationContext",
    "WelcomeTracking",
    # qr
    "AssignQR",
]
