"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - short_urls table: hash key to target URL mappings
    - clicks table: one row per admitted redirect
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # Tables may already exist when the app created them on startup
    if 'short_urls' not in existing_tables:
        op.create_table(
            'short_urls',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('url_hash', sa.String(length=100), nullable=False),
            sa.Column('target', sa.Text(), nullable=False),
            sa.Column('mode', sa.Integer(), nullable=False, server_default='307'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('owner', sa.String(length=100), nullable=True),
            sa.Column('sponsor', sa.String(length=200), nullable=True),
            sa.Column('safety', sa.String(length=10), nullable=False, server_default='unknown'),
            sa.Column('ip', sa.String(length=45), nullable=True),
            sa.Column('country', sa.String(length=2), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_short_urls_url_hash', 'short_urls', ['url_hash'], unique=True)
        op.create_index('ix_short_urls_created_at', 'short_urls', ['created_at'])

    if 'clicks' not in existing_tables:
        op.create_table(
            'clicks',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('url_hash', sa.String(length=100), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('ip', sa.String(length=45), nullable=True),
            sa.Column('referrer', sa.String(length=500), nullable=True),
            sa.Column('browser', sa.String(length=50), nullable=True),
            sa.Column('platform', sa.String(length=50), nullable=True),
            sa.Column('country', sa.String(length=2), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_clicks_url_hash', 'clicks', ['url_hash'])
        op.create_index('ix_clicks_created_at', 'clicks', ['created_at'])


def downgrade() -> None:
    """Drop all tables and indexes."""
    op.drop_index('ix_clicks_created_at', table_name='clicks')
    op.drop_index('ix_clicks_url_hash', table_name='clicks')
    op.drop_table('clicks')

    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_url_hash', table_name='short_urls')
    op.drop_table('short_urls')
