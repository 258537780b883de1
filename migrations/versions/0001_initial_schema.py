"""Initial schema: users, chatbots and every tenant table.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _common_columns(*, activity_flag: str = 'is_active'):
    """id, owner and timestamps shared by every tenant table."""
    return [
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column(activity_flag, sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
    ]


def _chatbot_fk(ondelete: str, nullable: bool):
    return sa.Column(
        'chatbot_id',
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey('chatbots.id', ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('is_superadmin', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('auth_provider', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'chatbots',
        *_common_columns(),
        sa.Column('name_chatbot', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
    )
    op.create_index('idx_chatbots_user_id', 'chatbots', ['user_id'])
    # Names are unique per owner regardless of case
    op.execute("CREATE UNIQUE INDEX uq_chatbots_user_lower_name ON chatbots (user_id, lower(name_chatbot))")

    op.create_table(
        'bot_flows',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('keyword', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('response_text', sa.Text(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('idx_bot_flows_user_id', 'bot_flows', ['user_id'])
    op.create_index('idx_bot_flows_chatbot_id', 'bot_flows', ['chatbot_id'])

    op.create_table(
        'welcomes',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('welcome_message', sa.Text(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
    )
    op.create_index('idx_welcomes_user_id', 'welcomes', ['user_id'])
    op.create_index('idx_welcomes_chatbot_id', 'welcomes', ['chatbot_id'])

    op.create_table(
        'behavior_prompts',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('prompt_text', sa.Text(), nullable=False),
        sa.Column('embedding', postgresql.JSONB(), nullable=True),
    )
    op.create_index('idx_behavior_prompts_user_id', 'behavior_prompts', ['user_id'])
    op.create_index('idx_behavior_prompts_chatbot_id', 'behavior_prompts', ['chatbot_id'])

    op.create_table(
        'knowledge_prompts',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('prompt_text', sa.Text(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('embedding', postgresql.JSONB(), nullable=True),
    )
    op.create_index('idx_knowledge_prompts_user_id', 'knowledge_prompts', ['user_id'])
    op.create_index('idx_knowledge_prompts_chatbot_id', 'knowledge_prompts', ['chatbot_id'])
    op.create_index('idx_knowledge_prompts_category', 'knowledge_prompts', ['category'])

    op.create_table(
        'blacklist',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('phone_number', sa.String(50), nullable=False),
        sa.UniqueConstraint('user_id', 'chatbot_id', 'phone_number', name='uq_blacklist_user_chatbot_phone'),
    )
    op.create_index('idx_blacklist_user_id', 'blacklist', ['user_id'])

    op.create_table(
        'leads',
        *_common_columns(),
        _chatbot_fk('SET NULL', True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint("status in ('pending','in_progress','converted')", name='ck_leads_status'),
    )
    op.create_index('idx_leads_user_id', 'leads', ['user_id'])

    op.create_table(
        'products_services',
        *_common_columns(activity_flag='active'),
        _chatbot_fk('SET NULL', True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.CheckConstraint("price is null or price >= 0", name='ck_products_services_price'),
    )
    op.create_index('idx_products_services_user_id', 'products_services', ['user_id'])

    op.create_table(
        'customer_insights',
        *_common_columns(),
        _chatbot_fk('SET NULL', True),
        sa.Column('phone_number', sa.String(50), nullable=False),
        sa.Column('customer_type', sa.String(40), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('last_interaction', sa.DateTime(timezone=True), nullable=True),
        sa.Column('interaction_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('metadata', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.CheckConstraint(
            "customer_type in ('potencialmente_interesado','curioso','cliente_activo')",
            name='ck_customer_insights_customer_type',
        ),
    )
    op.create_index('idx_customer_insights_user_id', 'customer_insights', ['user_id'])
    op.create_index('idx_customer_insights_phone_number', 'customer_insights', ['phone_number'])

    op.create_table(
        'business_documents',
        *_common_columns(activity_flag='active'),
        _chatbot_fk('SET NULL', True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('document_type', sa.String(20), nullable=False, server_default='info'),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('tags', postgresql.ARRAY(sa.Text()), nullable=False, server_default='{}'),
        sa.Column('metadata', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.CheckConstraint(
            "document_type in ('info','schedule','policy','other')",
            name='ck_business_documents_document_type',
        ),
    )
    op.create_index('idx_business_documents_user_id', 'business_documents', ['user_id'])

    op.create_table(
        'client_data',
        *_common_columns(),
        _chatbot_fk('CASCADE', False),
        sa.Column('identification_number', sa.String(100), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('media_url', sa.Text(), nullable=True),
    )
    op.create_index('idx_client_data_user_id', 'client_data', ['user_id'])
    op.create_index('idx_client_data_chatbot_id', 'client_data', ['chatbot_id'])

    op.create_table(
        'ai_configs',
        *_common_columns(activity_flag='enabled'),
        _chatbot_fk('SET NULL', True),
        sa.Column('settings', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
    )
    op.create_index('idx_ai_configs_user_id', 'ai_configs', ['user_id'])

    op.create_table(
        'conversation_contexts',
        *_common_columns(),
        _chatbot_fk('SET NULL', True),
        sa.Column('phone_number', sa.String(50), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('metadata', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.CheckConstraint("role in ('user','assistant','system')", name='ck_conversation_contexts_role'),
    )
    op.create_index('idx_conversation_contexts_user_id', 'conversation_contexts', ['user_id'])
    op.create_index('idx_conversation_contexts_phone_number', 'conversation_contexts', ['phone_number'])

    op.create_table(
        'welcome_trackings',
        *_common_columns(),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('client_data.id', ondelete='CASCADE'), nullable=False),
        sa.Column('welcome_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('welcomes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('interaction_date', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint("status in ('pending','in_progress','completed')", name='ck_welcome_trackings_status'),
    )
    op.create_index('idx_welcome_trackings_user_id', 'welcome_trackings', ['user_id'])

    op.create_table(
        'assign_qr',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url_qr', sa.Text(), nullable=False),
        sa.Column('port', sa.String(10), nullable=False),
        sa.Column('is_assigned', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.UniqueConstraint('user_id', name='uq_assign_qr_user_id'),
    )


def downgrade() -> None:
    for table in (
        'assign_qr',
        'welcome_trackings',
        'conversation_contexts',
        'ai_configs',
        'client_data',
        'business_documents',
        'customer_insights',
        'products_services',
        'leads',
        'blacklist',
        'knowledge_prompts',
        'behavior_prompts',
        'welcomes',
        'bot_flows',
        'chatbots',
        'users',
    ):
        op.drop_table(table)
