import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Float, Numeric, ForeignKey, Index, Boolean, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from botpanel.db.types import StringList


class Lead(Base):
    __tablename__ = 'leads'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default='pending')
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_leads_user_id', 'user_id'),
        CheckConstraint("status in ('pending','in_progress','converted')", name='ck_leads_status'),
    )


class ProductService(Base):
    __tablename__ = 'products_services'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    category = Column(String(100), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_products_services_user_id', 'user_id'),
        CheckConstraint("price is null or price >= 0", name='ck_products_services_price'),
    )


class CustomerInsight(Base):
    __tablename__ = 'customer_insights'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    phone_number = Column(String(50), nullable=False)
    customer_type = Column(String(40), nullable=False)
    confidence_score = Column(Float, nullable=False, default=0.0)
    last_interaction = Column(DateTime(timezone=True), nullable=True)
    interaction_count = Column(Integer, nullable=False, default=0)
    metadata_col = Column('metadata', JSONB, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_customer_insights_user_id', 'user_id'),
        Index('idx_customer_insights_phone_number', 'phone_number'),
        CheckConstraint(
            "customer_type in ('potencialmente_interesado','curioso','cliente_activo')",
            name='ck_customer_insights_customer_type',
        ),
    )


class BusinessDocument(Base):
    __tablename__ = 'business_documents'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='SET NULL'), nullable=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    document_type = Column(String(20), nullable=False, default='info')
    category = Column(String(100), nullable=True)
    tags = Column(StringList(), nullable=False, default=list)
    metadata_col = Column('metadata', JSONB, nullable=False, default=dict)
    priority = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_business_documents_user_id', 'user_id'),
        CheckConstraint(
            "document_type in ('info','schedule','policy','other')",
            name='ck_business_documents_document_type',
        ),
    )


class ClientData(Base):
    __tablename__ = 'client_data'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    chatbot_id = Column(UUID(as_uuid=True), ForeignKey('chatbots.id', ondelete='CASCADE'), nullable=False)
    identification_number = Column(String(100), nullable=True)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True)
    media_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    chatbot = relationship("Chatbot", back_populates="clients")
    trackings = relationship("WelcomeTracking", back_populates="client", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_client_data_user_id', 'user_id'),
        Index('idx_client_data_chatbot_id', 'chatbot_id'),
    )
