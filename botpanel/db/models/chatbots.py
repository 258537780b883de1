import uuid
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Index, Boolean, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from botpanel.db.types import StringList


class Chatbot(Base):
    __tablename__ = 'chatbots'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    name_chatbot = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    # Rows that cannot exist without their chatbot
    flows = relationship("BotFlow", back_populates="chatbot", cascade="all, delete-orphan")
    welcomes = relationship("Welcome", back_populates="chatbot", cascade="all, delete-orphan")
    behavior_prompts = relationship("BehaviorPrompt", back_populates="chatbot", cascade="all, delete-orphan")
    knowledge_prompts = relationship("KnowledgePrompt", back_populates="chatbot", cascade="all, delete-orphan")
    blacklist_entries = relationship("BlacklistEntry", back_populates="chatbot", cascade="all, delete-orphan")
    clients = relationship("ClientData", back_populates="chatbot", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_chatbots_user_id', 'user_id'),
    )


class BotFlow(Base):
    __tablename__ = 'bot_flows'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    keyword = Column(StringList(), nullable=False, default=list)
    response_text = Column(Text, nullable=False)
    media_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="flows")

    __table_args__ = (
        Index('idx_bot_flows_user_id', 'user_id'),
        Index('idx_bot_flows_chatbot_id', 'chatbot_id'),
    )


class Welcome(Base):
    __tablename__ = 'welcomes'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    welcome_message = Column(Text, nullable=False)
    media_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="welcomes")
    trackings = relationship("WelcomeTracking", back_populates="welcome", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_welcomes_user_id', 'user_id'),
        Index('idx_welcomes_chatbot_id', 'chatbot_id'),
    )


class BlacklistEntry(Base):
    __tablename__ = 'blacklist'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    phone_number = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="blacklist_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'chatbot_id', 'phone_number', name='uq_blacklist_user_chatbot_phone'),
        Index('idx_blacklist_user_id', 'user_id'),
    )
