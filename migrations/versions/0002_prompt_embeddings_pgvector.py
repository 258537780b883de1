"""Switch prompt embedding columns to pgvector.

Revision ID: 0002_prompt_embeddings_pgvector
Revises: 0001_initial_schema
Create Date: 2026-10-19 09:30:00
"""
import os

from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision = "0002_prompt_embeddings_pgvector"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

PROMPT_TABLES = ("behavior_prompts", "knowledge_prompts")


def _dimension() -> int:
    raw = os.getenv("EMBEDDING_DIMENSION", "").strip()
    return int(raw) if raw.isdigit() and int(raw) > 0 else 1536


def upgrade() -> None:
    bind = op.get_bind()
    dialect = bind.dialect.name if bind else ""

    if dialect != "postgresql":
        return

    chk = bind.execute(sa.text("SELECT 1 FROM pg_available_extensions WHERE name = 'vector'"))
    if not chk.scalar():
        # Extension missing: keep the JSONB columns from the initial schema
        return
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")
    for table in PROMPT_TABLES:
        op.drop_column(table, "embedding")
        op.add_column(table, sa.Column("embedding", Vector(_dimension()), nullable=True))


def downgrade() -> None:
    bind = op.get_bind()
    dialect = bind.dialect.name if bind else ""

    if dialect != "postgresql":
        return
    for table in PROMPT_TABLES:
        op.drop_column(table, "embedding")
        op.add_column(table, sa.Column("embedding", sa.dialects.postgresql.JSONB(), nullable=True))
