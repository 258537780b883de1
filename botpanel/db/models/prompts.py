import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from botpanel.db.types import EmbeddingVector, configured_embedding_dimension


class BehaviorPrompt(Base):
    __tablename__ = 'behavior_prompts'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    prompt_text = Column(Text, nullable=False)
    embedding = Column(EmbeddingVector(configured_embedding_dimension()), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="behavior_prompts")

    __table_args__ = (
        Index('idx_behavior_prompts_user_id', 'user_id'),
        Index('idx_behavior_prompts_chatbot_id', 'chatbot_id'),
    )


class KnowledgePrompt(Base):
    __tablename__ = 'knowledge_prompts'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    prompt_text = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    embedding = Column(EmbeddingVector(configured_embedding_dimension()), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="knowledge_prompts")

    __table_args__ = (
        Index('idx_knowledge_prompts_user_id', 'user_id'),
        Index('idx_knowledge_prompts_chatbot_id', 'chatbot_id'),
        Index('idx_knowledge_prompts_category', 'category'),
    )
