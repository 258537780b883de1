"""
Row-level security policies for tenant tables.

Enables RLS on every owner-scoped table with a policy restricting rows to the
user named by the 'botpanel.user_id' GUC. The policy only bites when the
session turns it on:

  SET LOCAL botpanel.enable_rls = 'on';
  SET LOCAL botpanel.user_id = '<uuid>';

Sessions that never set 'botpanel.enable_rls' (migrations, operator tooling)
see every row. Table owners and superusers bypass RLS unless FORCE is used.

Revision ID: 0003_tenant_rls_policies
Revises: 0002_prompt_embeddings_pgvector
"""
from alembic import op


# revision identifiers, used by Alembic.
revision = '0003_tenant_rls_policies'
down_revision = '0002_prompt_embeddings_pgvector'
branch_labels = None
depends_on = None

TENANT_TABLES = (
    'chatbots',
    'bot_flows',
    'welcomes',
    'behavior_prompts',
    'knowledge_prompts',
    'blacklist',
    'leads',
    'products_services',
    'customer_insights',
    'business_documents',
    'client_data',
    'ai_configs',
    'conversation_contexts',
    'welcome_trackings',
    'assign_qr',
)

_TENANT_PREDICATE = (
    "coalesce(current_setting('botpanel.enable_rls', true), 'off') <> 'on' "
    "OR user_id::text = current_setting('botpanel.user_id', true)"
)


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != 'postgresql':
        return
    for table in TENANT_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"DROP POLICY IF EXISTS {table}_tenant ON {table}")
        op.execute(
            f"CREATE POLICY {table}_tenant ON {table} FOR ALL "
            f"USING ({_TENANT_PREDICATE}) WITH CHECK ({_TENANT_PREDICATE})"
        )


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != 'postgresql':
        return
    for table in TENANT_TABLES:
        op.execute(f"DROP POLICY IF EXISTS {table}_tenant ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
