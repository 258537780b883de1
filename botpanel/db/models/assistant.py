import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Boolean, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class AiConfig(Base):
    __tablename__ = 'ai_configs'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    # {name, model, temperature, max_tokens, system_prompt, priority}
    settings = Column(JSONB, nullable=False, default=dict)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_ai_configs_user_id', 'user_id'),
    )


class ConversationContext(Base):
    __tablename__ = 'conversation_contexts'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    phone_number = Column(String(50), nullable=False)
    role = Column(String(20), nullable=False, default='user')
    content = Column(Text, nullable=False)
    metadata_col = Column('metadata', JSONB, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), default=now_utc)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_conversation_contexts_user_id', 'user_id'),
        Index('idx_conversation_contexts_phone_number', 'phone_number'),
        CheckConstraint("role in ('user','assistant','system')", name='ck_conversation_contexts_role'),
    )


class WelcomeTracking(Base):
    __tablename__ = 'welcome_trackings'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey('client_data.id', ondelete='CASCADE'), nullable=False)
    welcome_id = Column(UUID(as_uuid=True), ForeignKey('welcomes.id', ondelete='CASCADE'), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    interaction_date = Column(DateTime(timezone=True), default=now_utc)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    client = relationship("ClientData", back_populates="trackings")
    welcome = relationship("Welcome", back_populates="trackings")

    __table_args__ = (
        Index('idx_welcome_trackings_user_id', 'user_id'),
        CheckConstraint("status in ('pending','in_progress','completed')", name='ck_welcome_trackings_status'),
    )
